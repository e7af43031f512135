"""
Data models for the configurator engine.

Uses dataclasses for structured, type-safe data representation.
Money is always decimal.Decimal; catalog entries are frozen.
"""
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(text: str) -> datetime:
    """ISO timestamp as an aware datetime; naive values are taken as UTC."""
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def new_id() -> str:
    return str(uuid.uuid4())


class Category(str, Enum):
    """Assembly step a component belongs to."""
    BASE = "base"
    MOUNTING = "mounting"
    POWER = "power"
    CONTROL = "control"
    SENSOR = "sensor"
    ACTUATOR = "actuator"
    INTERFACE = "interface"
    HOUSING = "housing"

    @property
    def step_order(self) -> int:
        return _STEP_ORDER[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def ordered(cls) -> list['Category']:
        """All categories in assembly order."""
        return sorted(cls, key=lambda c: c.step_order)

    @classmethod
    def parse(cls, value: str) -> 'Category':
        """Accept either the slug ("power") or the label ("Power Supply")."""
        text = str(value).strip()
        for category in cls:
            if text.lower() in (category.value, category.label.lower()):
                return category
        raise ValueError(f"Unknown category '{value}'")


_STEP_ORDER = {
    Category.BASE: 0,
    Category.MOUNTING: 1,
    Category.POWER: 2,
    Category.CONTROL: 3,
    Category.SENSOR: 4,
    Category.ACTUATOR: 5,
    Category.INTERFACE: 6,
    Category.HOUSING: 7,
}

_LABELS = {
    Category.BASE: "Base Component",
    Category.MOUNTING: "Mounting System",
    Category.POWER: "Power Supply",
    Category.CONTROL: "Control Module",
    Category.SENSOR: "Sensor",
    Category.ACTUATOR: "Actuator",
    Category.INTERFACE: "Interface Module",
    Category.HOUSING: "Housing",
}


@dataclass(frozen=True)
class TraceStep:
    """A single step in the pricing trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class Component:
    """A catalog entry that can occupy one category slot."""
    id: str
    name: str
    category: Category
    description: str
    base_price: Decimal
    specifications: dict[str, str] = field(default_factory=dict, hash=False, compare=False)
    compatibility_tags: frozenset[str] = frozenset()
    required_tags: frozenset[str] = frozenset()  # not consumed by the resolver
    model_file_name: Optional[str] = None
    thumbnail_name: Optional[str] = None


@dataclass(frozen=True)
class CompatibilityRule:
    """Directed constraint from one source component onto a target category."""
    id: str
    source_component_id: str
    target_category: Category
    required_tags: frozenset[str] = frozenset()
    excluded_tags: frozenset[str] = frozenset()
    custom_validation: Optional[str] = None  # reserved, never evaluated

    def is_compatible(self, component: Component) -> bool:
        if component.category != self.target_category:
            return False
        if not self.required_tags <= component.compatibility_tags:
            return False
        return self.excluded_tags.isdisjoint(component.compatibility_tags)


class PricingRuleType(str, Enum):
    DISCOUNT = "discount"
    SURCHARGE = "surcharge"
    BUNDLE_DISCOUNT = "bundleDiscount"
    VOLUME_DISCOUNT = "volumeDiscount"


class AdjustmentType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixedAmount"


@dataclass(frozen=True)
class PriceAdjustment:
    """Signed adjustment; negative values are discounts for both types."""
    type: AdjustmentType
    value: Decimal

    def apply(self, price: Decimal) -> Decimal:
        if self.type == AdjustmentType.PERCENTAGE:
            return price * (1 + self.value / 100)
        return price + self.value


@dataclass(frozen=True)
class PricingCondition:
    """Predicate over a selection."""
    component_ids: frozenset[str] = frozenset()
    categories: frozenset[Category] = frozenset()
    minimum_quantity: Optional[int] = None
    requires_all: bool = False

    def is_met(self, selection: 'Selection') -> bool:
        if self.component_ids:
            met = self._compare(self.component_ids, selection.component_ids)
        elif self.categories:
            met = self._compare(self.categories, selection.categories)
        else:
            met = True

        if self.minimum_quantity is not None:
            met = met and len(selection) >= self.minimum_quantity
        return met

    def _compare(self, wanted: frozenset, present: set) -> bool:
        if self.requires_all:
            return wanted <= present
        return not wanted.isdisjoint(present)


@dataclass(frozen=True)
class PricingRule:
    """A conditional price adjustment. Catalog order is fold order."""
    id: str
    name: str
    type: PricingRuleType
    condition: PricingCondition
    adjustment: PriceAdjustment


class Selection:
    """
    Working configuration: at most one component per category.

    Mutated only through select_component/remove_component, which bump
    updated_at. Callers own persistence and must not share an instance
    across concurrent calls.
    """

    def __init__(
        self,
        name: str = "New Configuration",
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        now = utc_now()
        self.id = id or new_id()
        self.name = name
        self.created_at = created_at or now
        self.updated_at = updated_at or self.created_at
        self._slots: dict[Category, Component] = {}

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, category: Category) -> bool:
        return category in self._slots

    def __repr__(self) -> str:
        ids = ", ".join(c.id for c in self.components)
        return f"Selection(id={self.id!r}, name={self.name!r}, components=[{ids}])"

    def select_component(self, component: Component, now: Optional[datetime] = None):
        """Put a component in its category slot, replacing any occupant."""
        self._slots[component.category] = component
        self.updated_at = now or utc_now()

    def remove_component(self, category: Category, now: Optional[datetime] = None):
        """Empty a category slot. Removing an empty slot is a no-op."""
        if self._slots.pop(category, None) is not None:
            self.updated_at = now or utc_now()

    def get(self, category: Category) -> Optional[Component]:
        return self._slots.get(category)

    @property
    def components(self) -> list[Component]:
        """Selected components in step order."""
        return [self._slots[c] for c in Category.ordered() if c in self._slots]

    @property
    def component_ids(self) -> set[str]:
        return {c.id for c in self._slots.values()}

    @property
    def categories(self) -> set[Category]:
        return set(self._slots)

    @property
    def is_empty(self) -> bool:
        return not self._slots

    def is_complete(self) -> bool:
        """Complete enough to price: a Base component is present."""
        return Category.BASE in self._slots

    def copy(self) -> 'Selection':
        clone = Selection(self.name, self.id, self.created_at, self.updated_at)
        clone._slots = dict(self._slots)
        return clone

    def without(self, category: Category) -> 'Selection':
        """Copy of this selection with one slot emptied; timestamps untouched."""
        clone = self.copy()
        clone._slots.pop(category, None)
        return clone

    def to_dict(self) -> dict:
        """Storage shape; components are referenced by id."""
        return {
            "id": self.id,
            "name": self.name,
            "selectedComponents": {c.category.value: c.id for c in self.components},
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class BOMLineItem:
    """One selected component priced at its catalog base price."""
    id: str
    component: Component
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"Line quantity must be at least 1, got {self.quantity}")

    @classmethod
    def for_component(cls, component: Component, quantity: int = 1) -> 'BOMLineItem':
        return cls(
            id=new_id(),
            component=component,
            quantity=quantity,
            unit_price=component.base_price,
            total_price=component.base_price * quantity,
        )


@dataclass(frozen=True)
class AdjustmentDetail:
    """A matched pricing rule and its effect on the running total."""
    id: str
    rule: PricingRule
    adjustment: PriceAdjustment
    description: str
    match_reason: str
    price_before: Decimal
    price_after: Decimal


@dataclass(frozen=True)
class BillOfMaterials:
    """Priced, itemised snapshot of a selection."""
    id: str
    selection_id: str
    line_items: tuple[BOMLineItem, ...]
    adjustments: tuple[AdjustmentDetail, ...]
    subtotal: Decimal
    total: Decimal
    generated_at: datetime
    warnings: tuple[str, ...] = ()
    trace: tuple[TraceStep, ...] = ()

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_quote_bom(self) -> 'QuoteBOM':
        """Decouple from the catalog: keep names, drop component objects."""
        return QuoteBOM(
            subtotal=self.subtotal,
            total=self.total,
            items=tuple(
                QuoteBOMItem(
                    id=item.id,
                    component_name=item.component.name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total_price=item.total_price,
                )
                for item in self.line_items
            ),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "selectionId": self.selection_id,
            "lineItems": [
                {
                    "id": item.id,
                    "componentId": item.component.id,
                    "componentName": item.component.name,
                    "category": item.component.category.value,
                    "quantity": item.quantity,
                    "unitPrice": str(item.unit_price),
                    "totalPrice": str(item.total_price),
                }
                for item in self.line_items
            ],
            "adjustments": [
                {
                    "ruleId": adj.rule.id,
                    "description": adj.description,
                    "type": adj.adjustment.type.value,
                    "value": str(adj.adjustment.value),
                    "matchReason": adj.match_reason,
                    "priceBefore": str(adj.price_before),
                    "priceAfter": str(adj.price_after),
                }
                for adj in self.adjustments
            ],
            "subtotal": str(self.subtotal),
            "total": str(self.total),
            "generatedAt": self.generated_at.isoformat(),
            "warnings": list(self.warnings),
        }


class QuoteStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


@dataclass(frozen=True)
class QuoteBOMItem:
    id: str
    component_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


@dataclass(frozen=True)
class QuoteBOM:
    subtotal: Decimal
    total: Decimal
    items: tuple[QuoteBOMItem, ...] = ()


@dataclass(frozen=True)
class Quote:
    """Time-bounded offer. Never mutated; status changes produce a new Quote."""
    id: str
    configuration_id: str
    user_id: str
    bill_of_materials: QuoteBOM
    valid_until: datetime
    status: QuoteStatus
    created_at: datetime
    notes: Optional[str] = None

    def effective_status(self, now: Optional[datetime] = None) -> QuoteStatus:
        """Expiry by time takes precedence over the stored status."""
        now = now or utc_now()
        if now > self.valid_until:
            return QuoteStatus.EXPIRED
        return self.status

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.effective_status(now) == QuoteStatus.EXPIRED

    def with_status(self, status: QuoteStatus) -> 'Quote':
        return replace(self, status=status)

    def to_dict(self) -> dict:
        """Persisted shape. Decimals as strings so the round trip is exact."""
        bom = self.bill_of_materials
        data = {
            "id": self.id,
            "configurationId": self.configuration_id,
            "userId": self.user_id,
            "billOfMaterials": {
                "subtotal": str(bom.subtotal),
                "total": str(bom.total),
                "items": [
                    {
                        "id": item.id,
                        "componentName": item.component_name,
                        "quantity": item.quantity,
                        "unitPrice": str(item.unit_price),
                        "totalPrice": str(item.total_price),
                    }
                    for item in bom.items
                ],
            },
            "validUntil": self.valid_until.isoformat(),
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
        }
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Quote':
        bom = data["billOfMaterials"]
        return cls(
            id=data["id"],
            configuration_id=data["configurationId"],
            user_id=data["userId"],
            bill_of_materials=QuoteBOM(
                subtotal=Decimal(str(bom["subtotal"])),
                total=Decimal(str(bom["total"])),
                items=tuple(
                    QuoteBOMItem(
                        id=item["id"],
                        component_name=item["componentName"],
                        quantity=int(item["quantity"]),
                        unit_price=Decimal(str(item["unitPrice"])),
                        total_price=Decimal(str(item["totalPrice"])),
                    )
                    for item in bom.get("items", [])
                ),
            ),
            valid_until=parse_timestamp(data["validUntil"]),
            status=QuoteStatus(data["status"]),
            created_at=parse_timestamp(data["createdAt"]),
            notes=data.get("notes"),
        )


def add_days(moment: datetime, days: int) -> datetime:
    return moment + timedelta(days=days)
