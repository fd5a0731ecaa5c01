"""
Tests for the product-import command
"""

import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from core.config import settings
from core.exceptions import AuthenticationError
from ingestion import cli
from ingestion.cache import DatabaseCache, MemoryCache
from ingestion.checkpoint import CheckpointManager
from models.product import Product
from conftest import SECOND_PRODUCT_ID, FakePageSource, make_page_payload, make_raw_product


def two_page_source(page_two=None):
    return FakePageSource({
        1: make_page_payload([make_raw_product()], current_page=1, last_page=2),
        2: page_two or make_page_payload(
            [make_raw_product(product_id=SECOND_PRODUCT_ID, slug="second")],
            current_page=2,
            last_page=2,
        ),
    })


async def count_products(session_factory) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(Product))
        return result.scalar_one()


class UnwritableCache(MemoryCache):
    """Cache whose deletes fail, like a locked database"""

    async def forget(self, key: str) -> None:
        raise OperationalError("DELETE FROM cache_entries", {}, Exception("database is locked"))


@pytest.mark.asyncio
async def test_import_success(session_factory, fake_sleep, capsys):
    source = two_page_source()

    exit_code = await cli.run_import(
        session_factory=session_factory,
        source=source,
        cache=MemoryCache(),
        runner_sleep=fake_sleep
    )

    out = capsys.readouterr().out
    assert exit_code == cli.EXIT_SUCCESS
    assert out.startswith("Starting product import...")
    assert "IMPORT SUMMARY" in out
    assert "Import completed successfully" in out
    assert source.requested == [1, 2]
    assert await count_products(session_factory) == 2


@pytest.mark.asyncio
async def test_dry_run_reports_and_saves_nothing(session_factory, fake_sleep, capsys):
    exit_code = await cli.run_import(
        dry_run=True,
        session_factory=session_factory,
        source=two_page_source(),
        cache=MemoryCache(),
        runner_sleep=fake_sleep
    )

    out = capsys.readouterr().out
    assert exit_code == cli.EXIT_SUCCESS
    assert "DRY RUN MODE: No data was saved to the database" in out
    assert await count_products(session_factory) == 0


@pytest.mark.asyncio
async def test_failed_validations_warning(session_factory, fake_sleep, capsys):
    source = FakePageSource({1: make_page_payload([make_raw_product(price=-10)])})

    exit_code = await cli.run_import(
        session_factory=session_factory,
        source=source,
        cache=MemoryCache(),
        runner_sleep=fake_sleep
    )

    out = capsys.readouterr().out
    assert exit_code == cli.EXIT_SUCCESS
    assert "1 products failed validation" in out
    assert settings.IMPORT_ERROR_LOG_PATH in out


@pytest.mark.asyncio
async def test_fresh_run_clears_stale_checkpoint(session_factory, fake_sleep):
    cache = MemoryCache()
    await CheckpointManager(cache, settings.IMPORT_CHECKPOINT_KEY).save(2)
    source = two_page_source()

    await cli.run_import(
        session_factory=session_factory,
        source=source,
        cache=cache,
        runner_sleep=fake_sleep
    )

    assert source.requested == [1, 2]


@pytest.mark.asyncio
async def test_resume_from_checkpoint(session_factory, fake_sleep, capsys):
    cache = MemoryCache()
    await CheckpointManager(cache, settings.IMPORT_CHECKPOINT_KEY).save(2)
    source = two_page_source()

    exit_code = await cli.run_import(
        resume=True,
        session_factory=session_factory,
        source=source,
        cache=cache,
        runner_sleep=fake_sleep
    )

    assert exit_code == cli.EXIT_SUCCESS
    assert "Resuming from page 2" in capsys.readouterr().out
    assert source.requested == [2]


@pytest.mark.asyncio
async def test_resume_without_checkpoint_starts_at_first_page(session_factory, fake_sleep):
    source = two_page_source()

    await cli.run_import(
        resume=True,
        session_factory=session_factory,
        source=source,
        cache=MemoryCache(),
        runner_sleep=fake_sleep
    )

    assert source.requested == [1, 2]


@pytest.mark.asyncio
async def test_critical_error_reports_resume_page(session_factory, fake_sleep, capsys):
    """
    Test: page 2 fails; the command exits 1 and the checkpoint survives in the database
    """
    source = two_page_source(page_two=AuthenticationError("HTTP 401 Unauthorized for page 2", 401))

    exit_code = await cli.run_import(
        session_factory=session_factory,
        source=source,
        runner_sleep=fake_sleep
    )

    err = capsys.readouterr().err
    assert exit_code == cli.EXIT_FAILURE
    assert "Critical error during import: " in err
    assert "HTTP 401 Unauthorized" in err
    assert "resume the import from page 2 using --resume" in err

    async with session_factory() as session:
        checkpoints = CheckpointManager(DatabaseCache(session), settings.IMPORT_CHECKPOINT_KEY)
        assert await checkpoints.get() == 2


@pytest.mark.asyncio
async def test_resume_after_failure_completes(session_factory, fake_sleep):
    failing = two_page_source(page_two=AuthenticationError("HTTP 401 Unauthorized for page 2", 401))
    await cli.run_import(session_factory=session_factory, source=failing, runner_sleep=fake_sleep)

    source = two_page_source()
    exit_code = await cli.run_import(
        resume=True,
        session_factory=session_factory,
        source=source,
        runner_sleep=fake_sleep
    )

    assert exit_code == cli.EXIT_SUCCESS
    assert source.requested == [2]
    assert await count_products(session_factory) == 2


@pytest.mark.asyncio
async def test_checkpoint_failure_before_first_page(session_factory, fake_sleep, capsys):
    """
    Test: clearing a stale checkpoint fails; the command reports it and exits 1
    """
    source = two_page_source()

    exit_code = await cli.run_import(
        session_factory=session_factory,
        source=source,
        cache=UnwritableCache(),
        runner_sleep=fake_sleep
    )

    err = capsys.readouterr().err
    assert exit_code == cli.EXIT_FAILURE
    assert "Critical error during import: " in err
    assert "database is locked" in err
    assert "resume the import from page 1 using --resume" in err
    assert source.requested == []


def test_parser_flags():
    args = cli.build_parser().parse_args(["--resume", "--dry-run"])

    assert args.resume is True
    assert args.dry_run is True

    defaults = cli.build_parser().parse_args([])
    assert defaults.resume is False
    assert defaults.dry_run is False


def test_main_passes_flags_and_returns_exit_code():
    with patch.object(cli, "run_import", new=AsyncMock(return_value=cli.EXIT_FAILURE)) as run_import, \
            patch.object(cli, "setup_logging") as setup_logging, \
            patch.object(cli, "engine") as engine:
        engine.dispose = AsyncMock()

        exit_code = cli.main(["--dry-run"])

    assert exit_code == cli.EXIT_FAILURE
    run_import.assert_awaited_once_with(resume=False, dry_run=True)
    setup_logging.assert_called_once()
    engine.dispose.assert_awaited_once()
