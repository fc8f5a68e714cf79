"""
表单自动结转会话

一个会话对应一张正在填写的新增表单：
- 维度字段（物品名、性别+尺码等）变化后防抖调度一次结转查询
- 每次调度生成递增的请求号，只应用最新请求的结果
- 用户手动填写过的字段不会被结转结果覆盖

会话运行在事件循环内，set_field 需在协程中调用。
"""

import asyncio
from decimal import Decimal
from typing import Any, Dict, Optional, Set

from app.core.config import settings
from app.core.logging_config import get_logger
from app.services.carry_forward import CarryForwardResolver, OpeningResult
from app.services.categories import CategoryKey, get_variant

logger = get_logger(__name__)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class AutoCarrySession:
    """新增表单的自动结转状态"""

    def __init__(
        self,
        category_type: Any,
        resolver: CarryForwardResolver,
        *,
        initial: Optional[Dict[str, Any]] = None,
        debounce: Optional[float] = None):
        self.variant = get_variant(category_type)
        self.resolver = resolver
        self.debounce = settings.AUTO_CARRY_DEBOUNCE_MS / 1000 if debounce is None else debounce

        self._form: Dict[str, Any] = self.variant.defaults()
        self._user_fields: Set[str] = set()
        self._carried_fields: Set[str] = set()

        self._generation = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._in_flight: Set[asyncio.Task] = set()

        self.last_result: Optional[OpeningResult] = None
        self.resolution_count = 0

        for name, value in (initial or {}).items():
            self._write_user_value(name, value)
        self._trigger_key = self.variant.trigger_key(self._form)

    # ===== 表单状态 =====

    @property
    def form(self) -> Dict[str, Any]:
        return dict(self._form)

    @property
    def trigger_key(self) -> Optional[str]:
        return self._trigger_key

    @property
    def pending(self) -> bool:
        return self._timer is not None or bool(self._in_flight)

    def preview_closing(self) -> Decimal:
        """表单实时期末值"""
        return self.variant.preview_closing(self._form)

    def set_field(self, name: str, value: Any) -> None:
        """用户输入

        只有维度字段变化才会重新调度结转。
        """
        self._write_user_value(name, value)

        new_key = self.variant.trigger_key(self._form)
        if new_key != self._trigger_key:
            logger.debug(f"结转维度变化: {self._trigger_key!r} -> {new_key!r}")
            self._trigger_key = new_key
            self._schedule()

    def refresh(self) -> None:
        """按当前维度重新结转（如打开带预填维度的表单时）"""
        self._schedule()

    def cancel(self) -> None:
        """取消待执行的结转，已发出的查询结果作废"""
        self._cancel_timer()
        self._generation += 1

    async def wait_idle(self) -> None:
        """等待防抖计时与进行中的查询全部结束"""
        loop = asyncio.get_running_loop()
        while self.pending:
            if self._in_flight:
                await asyncio.gather(*list(self._in_flight), return_exceptions=True)
            elif self._timer is not None:
                await asyncio.sleep(max(0.0, self._timer.when() - loop.time()))
                # 让计时回调先执行
                await asyncio.sleep(0)

    def _write_user_value(self, name: str, value: Any) -> None:
        # 读取最新状态、合并、整体写回
        form = dict(self._form)
        form[name] = value
        self._form = form
        if _is_empty(value):
            self._user_fields.discard(name)
        else:
            self._user_fields.add(name)
            self._carried_fields.discard(name)

    # ===== 调度 =====

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self) -> None:
        self._cancel_timer()
        self._generation += 1
        request_id = self._generation

        key = self.variant.category_key(self._form)
        if key is None:
            logger.debug("维度不完整，取消结转")
            self._clear_carried()
            return

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce, self._fire, request_id, key)

    def _fire(self, request_id: int, key: CategoryKey) -> None:
        self._timer = None
        if request_id != self._generation:
            return
        task = asyncio.ensure_future(self._resolve(request_id, key))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _resolve(self, request_id: int, key: CategoryKey) -> bool:
        self.resolution_count += 1
        result = await self.resolver.resolve_opening_value(self.variant.category_type, key)
        if request_id != self._generation:
            logger.debug(f"⏭️ 丢弃过期结转结果 #{request_id}{key}（最新 #{self._generation}）")
            return False
        self._apply(result)
        return True

    # ===== 结果合并 =====

    def _apply(self, result: OpeningResult) -> None:
        self.last_result = result
        if result.carried:
            updates = {self.variant.carried_field: result.opening}
            updates.update(result.resets)
            self._merge_carried(updates)
        else:
            self._clear_carried()

    def _merge_carried(self, updates: Dict[str, Any]) -> None:
        form = dict(self._form)
        for name, value in updates.items():
            if name in self._user_fields:
                logger.debug(f"保留用户输入字段: {name}")
                continue
            form[name] = value
            self._carried_fields.add(name)
        self._form = form

    def _clear_carried(self) -> None:
        """维度无结转值时，把之前结转填入的字段恢复默认"""
        if not self._carried_fields:
            return
        defaults = self.variant.defaults()
        form = dict(self._form)
        for name in self._carried_fields:
            form[name] = defaults.get(name)
        self._form = form
        self._carried_fields.clear()
