"""Tests for the service container and command line parser."""

import pytest

from ragsync.cli import build_parser, main
from ragsync.configs import EmbeddingSettings, Settings
from ragsync.configs.source import SourceSettings
from ragsync.container import ServiceContainer
from ragsync.core.exceptions import ConfigurationError


class TestServiceContainer:
    def test_missing_bucket_raises(self) -> None:
        container = ServiceContainer(Settings(source=SourceSettings(bucket="")))

        with pytest.raises(ConfigurationError):
            container.lister

    def test_missing_provider_raises(self) -> None:
        container = ServiceContainer(Settings(embedding=EmbeddingSettings(provider=None)))

        with pytest.raises(ConfigurationError):
            container.embedder

    @pytest.mark.asyncio
    async def test_close_without_engine(self) -> None:
        container = ServiceContainer(Settings())

        await container.close()

        assert container._engine is None


class TestParser:
    def test_search_arguments(self) -> None:
        args = build_parser().parse_args(["search", "what is rag", "--top-k", "3", "--context"])

        assert args.command == "search"
        assert args.query == "what is rag"
        assert args.top_k == 3
        assert args.context is True
        assert args.threshold is None

    def test_watch_interval(self) -> None:
        args = build_parser().parse_args(["watch", "--interval", "30"])

        assert args.interval == 30.0

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_configuration_error_exit_code(self, monkeypatch) -> None:
        async def failing_sync(settings):
            raise ConfigurationError("Source root not configured", setting="SOURCE_ROOT_PREFIX")

        monkeypatch.setattr("ragsync.cli.run_sync", failing_sync)
        monkeypatch.setattr("ragsync.cli.configure_logging", lambda level: None)

        assert main(["sync"]) == 2
