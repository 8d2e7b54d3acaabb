"""
Application-supplied UI hooks.

Hooks are resolved per call site: the wallet-level hook wins, otherwise the
wallet manager's hook of the same name is used.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Union

from .models import EvmAccount


logger = logging.getLogger(__name__)


OnConnect = Callable[[EvmAccount], Any]
OnBeforeSign = Callable[[List[bytes], Optional[List[int]]], Awaitable[None]]
OnAfterSign = Callable[..., Any]


@dataclass
class UIHooks:
    """Optional callbacks around connect and signing."""
    on_connect: Optional[OnConnect] = None
    on_before_sign: Optional[OnBeforeSign] = None
    on_after_sign: Optional[OnAfterSign] = None


class HookResolver:
    """Two-step hook lookup: instance-level override, else manager-level default."""

    def __init__(
        self,
        hooks: Optional[UIHooks] = None,
        manager_hooks: Optional[Union[UIHooks, Callable[[], Optional[UIHooks]]]] = None,
    ):
        self.hooks = hooks or UIHooks()
        self._manager_hooks = manager_hooks

    @property
    def manager_hooks(self) -> Optional[UIHooks]:
        if callable(self._manager_hooks):
            return self._manager_hooks()
        return self._manager_hooks

    def resolve(self, name: str) -> Optional[Callable[..., Any]]:
        hook = getattr(self.hooks, name, None)
        if hook is not None:
            return hook
        manager_hooks = self.manager_hooks
        return getattr(manager_hooks, name, None) if manager_hooks else None

    async def notify_connect(self, account: EvmAccount) -> None:
        hook = self.resolve("on_connect")
        if hook is None:
            return
        result = hook(account)
        if inspect.isawaitable(result):
            await result

    async def before_sign(self, txns: List[bytes], indexes_to_sign: Optional[List[int]]) -> None:
        """Run on_before_sign to completion; its failures abort signing."""
        hook = self.resolve("on_before_sign")
        if hook is None:
            return
        logger.debug("Running onBeforeSign hook")
        result = hook(txns, indexes_to_sign)
        if inspect.isawaitable(result):
            await result

    async def after_sign(self, success: bool, error_message: Optional[str] = None) -> None:
        """Best-effort on_after_sign; failures are logged and never propagated."""
        hook = self.resolve("on_after_sign")
        if hook is None:
            return
        logger.debug("Running onAfterSign hook")
        try:
            if success:
                result = hook(True)
            else:
                result = hook(False, error_message)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"onAfterSign hook failed: {exc}")
