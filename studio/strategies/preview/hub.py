"""Per-project preview fan-out.

Every open preview of a project gets the same UPDATE_HTML whenever the
project's template or state changes; the newest snapshot always wins.
"""

import logging
from typing import Any

from studio.interfaces.preview import BasePreviewChannel
from studio.interfaces.template import TemplateSnapshot
from studio.strategies.preview.host import PreviewHost, SelectionCallback
from studio.strategies.preview.renderer import PreviewRenderer

logger = logging.getLogger(__name__)


class PreviewHub:
    """Tracks preview hosts by project id."""

    def __init__(self, renderer: PreviewRenderer | None = None) -> None:
        self._renderer = renderer or PreviewRenderer()
        self._hosts: dict[str, set[PreviewHost]] = {}
        self._latest: dict[str, TemplateSnapshot] = {}

    def connect(
        self,
        project_id: str,
        channel: BasePreviewChannel,
        snapshot: TemplateSnapshot,
        on_select: SelectionCallback | None = None,
    ) -> PreviewHost:
        """Register a preview for a project.

        Args:
            project_id: The project being previewed.
            channel: Channel end connected to the rendering context.
            snapshot: Template and state to show if nothing newer is known.
            on_select: Optional ELEMENT_SELECTED callback.

        Returns:
            The host serving this preview.
        """
        self._latest.setdefault(project_id, snapshot)
        host = PreviewHost(
            channel=channel,
            source=lambda: self._latest[project_id],
            renderer=self._renderer,
            on_select=on_select,
        )
        self._hosts.setdefault(project_id, set()).add(host)
        logger.info(f"Preview connected for project {project_id} ({self.count(project_id)} open)")
        return host

    def disconnect(self, project_id: str, host: PreviewHost) -> None:
        """Forget a preview; the last one out drops the cached snapshot."""
        hosts = self._hosts.get(project_id)
        if hosts is None:
            return
        hosts.discard(host)
        if not hosts:
            del self._hosts[project_id]
            self._latest.pop(project_id, None)
        logger.info(f"Preview disconnected for project {project_id}")

    def count(self, project_id: str) -> int:
        return len(self._hosts.get(project_id, ()))

    async def publish(self, project_id: str, template: str, state: dict[str, Any]) -> int:
        """Record a new snapshot and push it to every open preview.

        Returns:
            Number of previews the update reached.
        """
        if project_id not in self._hosts:
            return 0

        self._latest[project_id] = TemplateSnapshot(template=template, state=dict(state))
        delivered = 0
        for host in list(self._hosts[project_id]):
            if await host.push():
                delivered += 1
            else:
                self.disconnect(project_id, host)

        logger.debug(f"Published project {project_id} to {delivered} previews")
        return delivered
