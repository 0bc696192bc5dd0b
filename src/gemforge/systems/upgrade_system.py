from __future__ import annotations

import logging

from esper import World

from gemforge.config import GameConfig
from gemforge.economy.prestige import (
    AUTO_BUY_COST,
    perform_prestige,
    purchase_prestige_upgrade,
    unlock_auto_buy,
)
from gemforge.economy.upgrades import UPGRADES, process_auto_buys, purchase_upgrade
from gemforge.events.bus import (
    EventBus,
    EVENT_PRESTIGE_PERFORMED,
    EVENT_PRESTIGE_REQUEST,
    EVENT_PRESTIGE_UPGRADE_PURCHASED,
    EVENT_PRESTIGE_UPGRADE_REQUEST,
    EVENT_UPGRADE_PURCHASE_REQUEST,
    EVENT_UPGRADE_PURCHASED,
)
from gemforge.systems.reward import RewardSystem
from gemforge.systems.state_utils import get_ledger

logger = logging.getLogger(__name__)


class UpgradeSystem:
    """Applies purchase and prestige intents to the ledger and runs auto-buys."""

    def __init__(self, world: World, event_bus: EventBus, reward: RewardSystem,
                 config: GameConfig | None = None):
        self.world = world
        self.event_bus = event_bus
        self.reward = reward
        self.config = config or GameConfig()
        self.event_bus.subscribe(EVENT_UPGRADE_PURCHASE_REQUEST, self.on_purchase_request)
        self.event_bus.subscribe(EVENT_PRESTIGE_REQUEST, self.on_prestige_request)
        self.event_bus.subscribe(EVENT_PRESTIGE_UPGRADE_REQUEST, self.on_prestige_upgrade_request)

    def on_purchase_request(self, sender, **kwargs):
        key = kwargs.get('key')
        if key in UPGRADES:
            self.purchase(key)

    def on_prestige_request(self, sender, **kwargs):
        self.prestige()

    def on_prestige_upgrade_request(self, sender, **kwargs):
        key = kwargs.get('key')
        if not key:
            return
        if kwargs.get('auto_buy'):
            self.unlock_auto_buy(key)
        else:
            self.purchase_prestige(key)

    def update(self, dt: float) -> None:
        ledger = get_ledger(self.world)
        if not ledger.auto_buy:
            return
        bought = process_auto_buys(ledger, self.config.price_multiplier)
        for key, cost in bought:
            self.event_bus.emit(EVENT_UPGRADE_PURCHASED, key=key, cost=cost, auto=True)
        if bought:
            self.reward.persist(reason="auto_buy")

    def purchase(self, key: str) -> bool:
        cost = purchase_upgrade(get_ledger(self.world), key, self.config.price_multiplier)
        if cost is None:
            return False
        self.event_bus.emit(EVENT_UPGRADE_PURCHASED, key=key, cost=cost, auto=False)
        self.reward.persist(reason="upgrade")
        return True

    def purchase_prestige(self, key: str) -> bool:
        cost = purchase_prestige_upgrade(get_ledger(self.world), key)
        if cost is None:
            return False
        self.event_bus.emit(EVENT_PRESTIGE_UPGRADE_PURCHASED, key=key, cost=cost)
        self.reward.persist(reason="prestige_upgrade")
        return True

    def unlock_auto_buy(self, key: str) -> bool:
        if not unlock_auto_buy(get_ledger(self.world), key):
            return False
        self.event_bus.emit(EVENT_PRESTIGE_UPGRADE_PURCHASED, key=f"auto_buy:{key}", cost=AUTO_BUY_COST)
        self.reward.persist(reason="auto_buy_unlock")
        return True

    def prestige(self) -> int:
        """Trade currency for prestige coins; the board restarts at the new arena size."""
        coins = perform_prestige(get_ledger(self.world))
        if coins <= 0:
            return 0
        logger.info("Prestige performed for %d coin(s)", coins)
        self.reward.persist(reason="prestige")
        self.event_bus.emit(EVENT_PRESTIGE_PERFORMED, coins=coins)
        return coins
