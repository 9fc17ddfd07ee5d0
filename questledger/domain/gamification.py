"""
Gamification domain entities: quests, badges and the per-user game profile.

The profile is process-wide: it is never part of a monthly snapshot and is
carried through month switches untouched.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

XP_CAP = 999_999


class QuestType(str, Enum):
    DAILY = "daily"
    ACHIEVEMENT = "achievement"


class QuestCategory(str, Enum):
    SPENDING = "spending"
    SAVING = "saving"
    BILLS = "bills"
    GOALS = "goals"
    STREAK = "streak"


class BadgeTier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


class Section(str, Enum):
    BILLS = "bills"
    ENVELOPES = "envelopes"
    INSIGHTS = "insights"
    GOALS = "goals"
    SAFE_TO_SPEND = "safe_to_spend"


@dataclass
class Quest:
    """
    Gamified task.

    Invariants: progress <= target; done <=> progress >= target; once done,
    a quest never goes back to not-done.
    """
    id: str
    title: str
    type: QuestType
    category: QuestCategory
    target: int
    xp: int
    coin_reward: int
    description: str = ""
    progress: int = 0
    done: bool = False
    expires_at: Optional[str] = None

    def set_progress(self, value: int) -> bool:
        """
        Clamp and store progress.

        Returns:
            True if this call completed the quest (the not-done -> done
            transition), False otherwise.
        """
        if self.done:
            return False
        self.progress = max(0, min(value, self.target))
        if self.progress >= self.target:
            self.done = True
            return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "category": self.category.value,
            "progress": self.progress,
            "target": self.target,
            "done": self.done,
            "xp": self.xp,
            "coin_reward": self.coin_reward,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quest":
        target = int(data.get("target", 1))
        done = bool(data.get("done", False))
        progress = min(int(data.get("progress", 0)), target)
        return cls(
            id=data["id"],
            title=data.get("title", data["id"]),
            description=data.get("description", ""),
            type=QuestType(data.get("type", QuestType.DAILY.value)),
            category=QuestCategory(data.get("category", QuestCategory.SPENDING.value)),
            target=target,
            xp=int(data.get("xp", 0)),
            coin_reward=int(data.get("coin_reward", 0)),
            progress=target if done else progress,
            done=done,
            expires_at=data.get("expires_at"),
        )


@dataclass
class Badge:
    """
    Permanent milestone unlocked from a lifetime counter.

    unlocked_at, once set, is never cleared. Progress of an unlocked badge
    is frozen at the value it had when it unlocked.
    """
    id: str
    name: str
    tier: BadgeTier
    requirement: int
    description: str = ""
    icon: str = ""
    progress: int = 0
    unlocked_at: Optional[str] = None

    @property
    def is_unlocked(self) -> bool:
        return self.unlocked_at is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "tier": self.tier.value,
            "requirement": self.requirement,
            "progress": self.progress,
            "unlocked_at": self.unlocked_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Badge":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            description=data.get("description", ""),
            icon=data.get("icon", ""),
            tier=BadgeTier(data.get("tier", BadgeTier.BRONZE.value)),
            requirement=int(data.get("requirement", 1)),
            progress=int(data.get("progress", 0)),
            unlocked_at=data.get("unlocked_at"),
        )


@dataclass
class Gamification:
    last_active: str
    xp: int = 0
    level: int = 1
    streak: int = 0
    streak_record: int = 0
    coins: int = 0
    total_xp_earned: int = 0
    total_coins_earned: int = 0
    quests_completed: int = 0
    quests: List[Quest] = field(default_factory=list)
    badges: List[Badge] = field(default_factory=list)
    # Lifetime counters survive month switches and resets
    lifetime_expenses: int = 0
    lifetime_bill_payments: int = 0
    lifetime_goals_completed: int = 0
    # section -> ISO timestamp of the last view
    daily_section_views: Dict[str, str] = field(default_factory=dict)

    def find_quest(self, quest_id: str) -> Optional[Quest]:
        return next((q for q in self.quests if q.id == quest_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "xp": self.xp,
            "level": self.level,
            "streak": self.streak,
            "streak_record": self.streak_record,
            "last_active": self.last_active,
            "coins": self.coins,
            "total_xp_earned": self.total_xp_earned,
            "total_coins_earned": self.total_coins_earned,
            "quests_completed": self.quests_completed,
            "quests": [q.to_dict() for q in self.quests],
            "badges": [b.to_dict() for b in self.badges],
            "lifetime_expenses": self.lifetime_expenses,
            "lifetime_bill_payments": self.lifetime_bill_payments,
            "lifetime_goals_completed": self.lifetime_goals_completed,
            "daily_section_views": dict(self.daily_section_views),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Gamification":
        return cls(
            xp=min(int(data.get("xp", 0)), XP_CAP),
            level=max(1, int(data.get("level", 1))),
            streak=int(data.get("streak", 0)),
            streak_record=int(data.get("streak_record", 0)),
            last_active=data["last_active"],
            coins=int(data.get("coins", 0)),
            total_xp_earned=int(data.get("total_xp_earned", 0)),
            total_coins_earned=int(data.get("total_coins_earned", 0)),
            quests_completed=int(data.get("quests_completed", 0)),
            quests=[Quest.from_dict(q) for q in data.get("quests") or []],
            badges=[Badge.from_dict(b) for b in data.get("badges") or []],
            lifetime_expenses=int(data.get("lifetime_expenses", 0)),
            lifetime_bill_payments=int(data.get("lifetime_bill_payments", 0)),
            lifetime_goals_completed=int(data.get("lifetime_goals_completed", 0)),
            daily_section_views=dict(data.get("daily_section_views") or {}),
        )
