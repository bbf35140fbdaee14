"""
Debounced text edits.

Field edits wait for a quiet period before they are dispatched, so a burst of
keystrokes on one node becomes a single `update_node_data` call carrying the
merged fields.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Tuple

from discovery_api.platform.env import get_canvas_edit_debounce_seconds

from .types import NodeType


class Debouncer:
    def __init__(self, store, delay: Optional[float] = None):
        self.store = store
        self.delay = get_canvas_edit_debounce_seconds() if delay is None else delay
        self._pending: Dict[str, Tuple[NodeType, Dict[str, Any]]] = {}
        self._timers: Dict[str, asyncio.Task] = {}

    @property
    def pending(self) -> Dict[str, Dict[str, Any]]:
        return {node_id: dict(fields) for node_id, (_, fields) in self._pending.items()}

    def edit(self, node_id: str, node_type: NodeType, **fields: Any) -> None:
        """Queue `fields` for the node and restart its quiet-period timer."""
        _, queued = self._pending.get(node_id, (node_type, {}))
        self._pending[node_id] = (NodeType(node_type), {**queued, **fields})

        timer = self._timers.pop(node_id, None)
        if timer is not None:
            timer.cancel()
        self._timers[node_id] = asyncio.get_running_loop().create_task(self._fire_later(node_id))

    def cancel(self, node_id: str) -> None:
        self._pending.pop(node_id, None)
        timer = self._timers.pop(node_id, None)
        if timer is not None:
            timer.cancel()

    async def flush(self) -> None:
        """Dispatch every queued edit now."""
        for node_id in list(self._pending):
            timer = self._timers.pop(node_id, None)
            if timer is not None:
                timer.cancel()
            await self._dispatch(node_id)

    async def _fire_later(self, node_id: str) -> None:
        await asyncio.sleep(self.delay)
        self._timers.pop(node_id, None)
        await self._dispatch(node_id)

    async def _dispatch(self, node_id: str) -> None:
        entry = self._pending.pop(node_id, None)
        if entry is None:
            return
        node_type, fields = entry
        await self.store.update_node_data(node_id, node_type, fields)
