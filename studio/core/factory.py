"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to instantiate
different strategy implementations at runtime based on
configuration or environment variables.
"""

import logging

from studio.core.config import Settings, get_settings
from studio.interfaces.template import (
    BaseGroupInferrer,
    BasePlaceholderScanner,
    BaseStateReconciler,
    BaseTemplateMutator,
    BaseThemeRewriter,
)
from studio.strategies.preview import PreviewHub, PreviewRenderer
from studio.strategies.template_engine import (
    GroupInferrer,
    PlaceholderScanner,
    StateReconciler,
    StrictReconciler,
    TemplateMutator,
    ThemeRewriter,
)

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Example:
        ```python
        factory = ComponentFactory(get_settings())

        reconciler = factory.get_reconciler()
        mutator = factory.get_mutator()
        result = mutator.duplicate(template, state, "item_title")
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._scanner_cache: PlaceholderScanner | None = None
        self._reconciler_cache: BaseStateReconciler | None = None
        self._group_inferrer_cache: GroupInferrer | None = None
        self._mutator_cache: TemplateMutator | None = None
        self._theme_rewriter_cache: ThemeRewriter | None = None
        self._preview_renderer_cache: PreviewRenderer | None = None
        self._preview_hub_cache: PreviewHub | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_scanner(self) -> BasePlaceholderScanner:
        """Get the placeholder scanner."""
        if self._scanner_cache is None:
            logger.info("Instantiating placeholder scanner")
            self._scanner_cache = PlaceholderScanner()
        return self._scanner_cache

    def get_reconciler(self, rename_policy: str | None = None) -> BaseStateReconciler:
        """Get a state reconciler for the given rename policy.

        Args:
            rename_policy: "heuristic" or "strict". If None, uses settings.

        Returns:
            A BaseStateReconciler implementation instance.

        Raises:
            ValueError: If the policy is unknown.
        """
        if self._reconciler_cache is None or rename_policy is not None:
            rename_policy = rename_policy or self._settings.rename_policy

            logger.info(f"Instantiating reconciler: {rename_policy}")

            match rename_policy:
                case "heuristic":
                    self._reconciler_cache = StateReconciler()
                case "strict":
                    self._reconciler_cache = StrictReconciler()
                case _:
                    raise ValueError(
                        f"Unknown rename policy: {rename_policy}. "
                        f"Valid options: 'heuristic', 'strict'"
                    )

        return self._reconciler_cache

    def get_group_inferrer(self) -> BaseGroupInferrer:
        """Get the group inferrer, sharing the factory's scanner."""
        if self._group_inferrer_cache is None:
            logger.info("Instantiating group inferrer")
            self._group_inferrer_cache = GroupInferrer(scanner=self.get_scanner())
        return self._group_inferrer_cache

    def get_mutator(self) -> BaseTemplateMutator:
        """Get the structural template mutator."""
        if self._mutator_cache is None:
            logger.info("Instantiating template mutator")
            self._mutator_cache = TemplateMutator(
                inferrer=self.get_group_inferrer(),
                key_suffix_max=self._settings.key_suffix_max,
            )
        return self._mutator_cache

    def get_theme_rewriter(self) -> BaseThemeRewriter:
        """Get the theme rewriter configured with the known font list."""
        if self._theme_rewriter_cache is None:
            logger.info("Instantiating theme rewriter")
            self._theme_rewriter_cache = ThemeRewriter(fonts=self._settings.theme_fonts)
        return self._theme_rewriter_cache

    def get_preview_renderer(self) -> PreviewRenderer:
        """Get the preview renderer."""
        if self._preview_renderer_cache is None:
            logger.info("Instantiating preview renderer")
            self._preview_renderer_cache = PreviewRenderer()
        return self._preview_renderer_cache

    def get_preview_hub(self) -> PreviewHub:
        """Get the process-wide preview hub."""
        if self._preview_hub_cache is None:
            logger.info("Instantiating preview hub")
            self._preview_hub_cache = PreviewHub(renderer=self.get_preview_renderer())
        return self._preview_hub_cache

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances to be created on next access.
        Useful for testing or when settings change.
        """
        self._scanner_cache = None
        self._reconciler_cache = None
        self._group_inferrer_cache = None
        self._mutator_cache = None
        self._theme_rewriter_cache = None
        self._preview_renderer_cache = None
        self._preview_hub_cache = None
        logger.debug("Component factory cache cleared")


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
