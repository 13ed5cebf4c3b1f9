"""
core.dialogue.catalog

Selectable training options (personas, scenarios, difficulty levels, brands)
and the knowledge text that is embedded into prompts.

Every option has one canonical id (used in prompts and stored on the
SessionConfig) and a few aliases the front-ends send: the camelCase UI key and
the Chinese label shown in the configuration panel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class CatalogOption:
    """One selectable persona / scenario / difficulty."""

    id: str
    key: str
    label_zh: str
    label_en: str
    description: str

    @property
    def aliases(self) -> Tuple[str, ...]:
        return (self.id, self.key, self.label_zh, self.label_en)


@dataclass(frozen=True)
class KnowledgeSources:
    """Knowledge text blocks injected into persona and dialogue prompts."""

    brand: str
    product_line: str
    product: str
    topics: List[str] = field(default_factory=list)


PERSONAS: List[CatalogOption] = [
    CatalogOption(
        id="HNWI",
        key="hnw",
        label_zh="高净值顾客",
        label_en="High-net-worth client",
        description=(
            "Wealthy, time-poor client used to personal service. Cares about "
            "exclusivity, craftsmanship and being recognised; price is rarely "
            "the issue but patience is short."
        ),
    ),
    CatalogOption(
        id="TOURIST",
        key="tourist",
        label_zh="旅游客",
        label_en="Tourist",
        description=(
            "Visitor on a short trip. Compares prices with home, asks about tax "
            "refunds, stock availability and whether items are easy to carry."
        ),
    ),
    CatalogOption(
        id="HESITANT",
        key="hesitant",
        label_zh="犹豫型顾客",
        label_en="Hesitant customer",
        description=(
            "Likes the products but struggles to decide. Asks for reassurance, "
            "changes their mind and needs the associate to narrow the options."
        ),
    ),
    CatalogOption(
        id="GIFT",
        key="gift",
        label_zh="礼物购买者",
        label_en="Gift buyer",
        description=(
            "Shopping for someone else. Knows little about the recipient's "
            "taste and relies on the associate for recommendations and packaging."
        ),
    ),
    CatalogOption(
        id="PRICE_SENSITIVE",
        key="priceSensitive",
        label_zh="价格敏感型顾客",
        label_en="Price-sensitive customer",
        description=(
            "Watches the budget closely. Questions value for money, asks about "
            "promotions and compares with other brands or channels."
        ),
    ),
]

SCENARIOS: List[CatalogOption] = [
    CatalogOption(
        id="FIRST_VISIT",
        key="firstVisit",
        label_zh="首次进店",
        label_en="First store visit",
        description="The customer walks into the boutique for the first time.",
    ),
    CatalogOption(
        id="VIP_RETURN",
        key="vipReturn",
        label_zh="VIP 回访",
        label_en="VIP return visit",
        description=(
            "A known VIP client returns; they expect to be remembered and "
            "offered something new."
        ),
    ),
    CatalogOption(
        id="GIFT_FOR_BOSS",
        key="giftForBoss",
        label_zh="购买送老板的礼物",
        label_en="Gift for the boss",
        description=(
            "The customer needs an appropriate, safe but impressive gift for "
            "their boss."
        ),
    ),
    CatalogOption(
        id="DUTY_FREE",
        key="dutyFree",
        label_zh="机场免税店场景",
        label_en="Airport duty-free",
        description=(
            "Airport duty-free boutique; the customer is short on time before "
            "boarding."
        ),
    ),
    CatalogOption(
        id="ONLINE_CONSULT",
        key="onlineInquiry",
        label_zh="线上咨询",
        label_en="Online consultation",
        description=(
            "The customer asks questions through an online chat and cannot see "
            "or touch the product."
        ),
    ),
]

DIFFICULTIES: List[CatalogOption] = [
    CatalogOption(
        id="BASIC",
        key="basic",
        label_zh="基础",
        label_en="Basic",
        description="Cooperative customer with clear needs and few objections.",
    ),
    CatalogOption(
        id="INTERMEDIATE",
        key="intermediate",
        label_zh="中级",
        label_en="Intermediate",
        description=(
            "Customer with hidden needs and two or three realistic objections."
        ),
    ),
    CatalogOption(
        id="ADVANCED",
        key="advanced",
        label_zh="高级",
        label_en="Advanced",
        description=(
            "Demanding customer with strong objections who leaves quickly if "
            "the associate is pushy or unprepared."
        ),
    ),
]

BRANDS: List[str] = ["Gucci", "Balenciaga", "Saint Laurent", "Bottega Veneta", "LV"]


def _index(options: List[CatalogOption]) -> Dict[str, CatalogOption]:
    index: Dict[str, CatalogOption] = {}
    for option in options:
        for alias in option.aliases:
            index[alias.strip().lower()] = option
    return index


_PERSONA_INDEX = _index(PERSONAS)
_SCENARIO_INDEX = _index(SCENARIOS)
_DIFFICULTY_INDEX = _index(DIFFICULTIES)


def _lookup(index: Dict[str, CatalogOption], value: Optional[str]) -> Optional[CatalogOption]:
    if not value:
        return None
    return index.get(value.strip().lower())


def find_persona(value: Optional[str]) -> Optional[CatalogOption]:
    """Resolve a persona id, UI key or label; None when unknown."""
    return _lookup(_PERSONA_INDEX, value)


def find_scenario(value: Optional[str]) -> Optional[CatalogOption]:
    """Resolve a scenario id, UI key or label; None when unknown."""
    return _lookup(_SCENARIO_INDEX, value)


def find_difficulty(value: Optional[str]) -> Optional[CatalogOption]:
    """Resolve a difficulty id, UI key or label; None when unknown."""
    return _lookup(_DIFFICULTY_INDEX, value)


# ---------------------------------------------------------------------------
# Knowledge
# ---------------------------------------------------------------------------

_BRAND_KNOWLEDGE = """\
Brand: {brand}
- Positioning: Italian/French heritage luxury house; craftsmanship, iconic
  monograms and seasonal runway collections.
- Service standards: greet within 30 seconds, offer a seat and a drink to
  clients who stay, never pressure, always offer after-sales care.
- After-sales: complimentary cleaning for leather goods in the first year,
  repairs handled by the brand atelier, exchange within 30 days with receipt.
"""

_PRODUCT_LINE_KNOWLEDGE = """\
Product lines at {brand}:
- Leather goods: top-handle bags, shoulder bags, belt bags, small leather
  goods (wallets, card holders). Core revenue line.
- Ready-to-wear: seasonal men's and women's collections.
- Shoes: loafers, sneakers, pumps; half sizes available on request.
- Accessories: silk scarves, belts, sunglasses, jewellery.
- Gifting: personalised hot-stamping on small leather goods, gift wrapping.
"""

_PRODUCT_KNOWLEDGE = """\
Reference products at {brand}:
- Signature top-handle bag, medium: full-grain calfskin, hand-stitched,
  around 3,000 EUR; available in black, tan and seasonal colours.
- Compact card holder: coated canvas with leather trim, around 350 EUR;
  the most popular gift item, personalisation takes about two weeks.
- Silk scarf 90x90: printed in Italy, around 450 EUR; seasonal prints.
- Leather belt, reversible: around 550 EUR; can be shortened in store.
"""

_KNOWLEDGE_TOPICS = [
    "brand heritage",
    "craftsmanship and materials",
    "after-sales service",
    "personalisation",
    "gift wrapping",
    "price and value",
]


def knowledge_for_brand(brand: str) -> KnowledgeSources:
    """Return the knowledge blocks for a brand, in a deterministic form."""
    name = (brand or "").strip()
    return KnowledgeSources(
        brand=_BRAND_KNOWLEDGE.format(brand=name),
        product_line=_PRODUCT_LINE_KNOWLEDGE.format(brand=name),
        product=_PRODUCT_KNOWLEDGE.format(brand=name),
        topics=list(_KNOWLEDGE_TOPICS),
    )
