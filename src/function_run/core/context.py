"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from function_run.core.config_store import ConfigStore, FilesystemConfigStore, GlobalConfig
from function_run.core.image_registry.abc import ImageRegistry
from function_run.core.image_registry.real import RealImageRegistry
from function_run.core.layout import ConfigLayout
from function_run.core.process_runner.abc import ProcessRunner
from function_run.core.process_runner.real import RealProcessRunner
from function_run.core.registry_index.abc import RegistryIndex
from function_run.core.registry_index.real import RealRegistryIndex
from function_run.core.user_feedback import InteractiveFeedback, SuppressedFeedback, UserFeedback


@dataclass(frozen=True)
class FunctionRunContext:
    """Immutable context holding all dependencies for function-run operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    registry_index: RegistryIndex
    image_registry: ImageRegistry
    process_runner: ProcessRunner
    config_store: ConfigStore
    feedback: UserFeedback
    config: GlobalConfig
    layout: ConfigLayout

    @staticmethod
    def for_test(
        config_root: Path,
        registry_index: RegistryIndex | None = None,
        image_registry: ImageRegistry | None = None,
        process_runner: ProcessRunner | None = None,
        config_store: ConfigStore | None = None,
        feedback: UserFeedback | None = None,
        config: GlobalConfig | None = None,
    ) -> "FunctionRunContext":
        """Create test context with optional pre-configured integration classes.

        Unspecified integrations default to empty fakes, so a test that forgets
        to configure one fails on an explicit fake error instead of touching
        the network or spawning processes.

        Args:
            config_root: Config root for the layout (usually under tmp_path)
            registry_index: Optional RegistryIndex. If None, creates empty FakeRegistryIndex.
            image_registry: Optional ImageRegistry. If None, creates empty FakeImageRegistry.
            process_runner: Optional ProcessRunner. If None, creates FakeProcessRunner.
            config_store: Optional ConfigStore. If None, creates InMemoryConfigStore.
            feedback: Optional UserFeedback. If None, uses InteractiveFeedback.
            config: Optional GlobalConfig. If None, uses defaults.

        Example:
            >>> index = FakeRegistryIndex(entries={bp: [entry]})
            >>> ctx = FunctionRunContext.for_test(tmp_path, registry_index=index)
        """
        from tests.fakes.image_registry import FakeImageRegistry
        from tests.fakes.process_runner import FakeProcessRunner
        from tests.fakes.registry_index import FakeRegistryIndex

        from function_run.core.config_store import InMemoryConfigStore

        if config is None:
            config = GlobalConfig()

        return FunctionRunContext(
            registry_index=registry_index if registry_index is not None else FakeRegistryIndex(),
            image_registry=image_registry if image_registry is not None else FakeImageRegistry(),
            process_runner=process_runner if process_runner is not None else FakeProcessRunner(),
            config_store=config_store if config_store is not None else InMemoryConfigStore(config),
            feedback=feedback if feedback is not None else InteractiveFeedback(),
            config=config,
            layout=ConfigLayout(root=config_root),
        )


def create_context(*, config_root: Path, quiet: bool = False) -> FunctionRunContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Args:
        config_root: Directory holding config.toml and the run layout
        quiet: If True, use SuppressedFeedback to hide progress output

    Raises:
        ConfigError: If config.toml exists but is malformed
    """
    config_store = FilesystemConfigStore(config_root)
    config = config_store.load()

    feedback: UserFeedback
    if quiet:
        feedback = SuppressedFeedback()
    else:
        feedback = InteractiveFeedback()

    return FunctionRunContext(
        registry_index=RealRegistryIndex(host=config.index_host, timeout=config.http_timeout),
        image_registry=RealImageRegistry(timeout=config.http_timeout),
        process_runner=RealProcessRunner(),
        config_store=config_store,
        feedback=feedback,
        config=config,
        layout=ConfigLayout(root=config_root),
    )
