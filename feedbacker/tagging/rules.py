"""Declarative rule tables for tagging and escalation.

Every keyword family, red-flag phrase and boilerplate utterance lives
here; ``extractor`` only iterates the tables. Stems are regex fragments
anchored at a word start and may be followed by any word characters,
so ``ткан`` matches "ткань" and "тканью" but not "соткана".
"""

import re
from dataclasses import dataclass, field

TAG_SIZE = "размер"
TAG_FIT = "посадка"
TAG_QUALITY = "качество"
TAG_PRICE = "цена"
TAG_DELIVERY = "доставка"
TAG_SERVICE = "сервис"
TAG_RETURNS = "возврат"
TAG_MATERIAL = "материал"
TAG_COLOR = "цвет"
TAG_ASSORTMENT = "ассортимент"
TAG_COMFORT = "удобство"


def _word_pattern(alternatives: tuple[str, ...]) -> re.Pattern[str]:
    joined = "|".join(f"(?:{alt})" for alt in alternatives)
    return re.compile(rf"(?<!\w)(?:{joined})\w*", re.IGNORECASE)


@dataclass(frozen=True)
class TagRule:
    """Keyword family mapped to a canonical tag."""

    tag: str
    stems: tuple[str, ...]
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "pattern", _word_pattern(self.stems))

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class RedFlagRule:
    """High-severity phrase forcing negative sentiment."""

    name: str
    phrases: tuple[str, ...]
    extra_tags: tuple[str, ...] = ()
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "pattern", _word_pattern(self.phrases))

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


# Declaration order is output order
TAG_RULES: tuple[TagRule, ...] = (
    TagRule(TAG_SIZE, (
        "размер", "великоват", "маловат", "ростовк", "size", "oversized", "undersized",
    )),
    TagRule(TAG_FIT, (
        "сидит", "сидел", "посадк", "облега", "фасон", "крой", "кроя", "fit",
    )),
    TagRule(TAG_QUALITY, (
        "качеств", "брак", "шов", "швы", "нитк", "разлез", "рв[её]т", "порва",
        "катышк", "дефект", "сломал", "сломан", "quality", "defect", "broken",
    )),
    TagRule(TAG_PRICE, (
        r"цен(?:а|е|у|ы|ой|ник|ам)(?!\w)", "дорог", "дешев", "дешёв", "стоимост",
        "переплат", "скидк", "price", "expensive", "cheap", "overpriced",
    )),
    TagRule(TAG_DELIVERY, (
        "доставк", "доставл", "курьер", r"пункт\w*\s+выдач", "самовывоз", "привез",
        "delivery", "shipping", "courier",
    )),
    TagRule(TAG_SERVICE, (
        "продав", "консультант", "сотрудник", "персонал", "обслуживан", "поддержк",
        "менеджер", "кассир", "staff", "service", "seller", "cashier",
    )),
    TagRule(TAG_RETURNS, (
        "возврат", r"верн(?:уть|у|ула|ул|ули)(?!\w)", "обмен", "гаранти",
        "refund", "return", "exchange",
    )),
    TagRule(TAG_MATERIAL, (
        "ткан", "материал", "хлопок", "хлопк", r"л[её]н(?!\w)", "льнян", "шерст",
        "синтетик", "полиэстер", "вискоз", "состав", "fabric", "material", "cotton",
        "wool",
    )),
    TagRule(TAG_COLOR, (
        "цвет", "оттен", "выцвет", "полинял", "линя", "colou?r",
    )),
    TagRule(TAG_ASSORTMENT, (
        "ассортимент", "выбор", "наличи", "assortment", "selection",
    )),
    TagRule(TAG_COMFORT, (
        "удобн", "неудобн", "комфорт", "comfort",
    )),
)

RED_FLAG_RULES: tuple[RedFlagRule, ...] = (
    RedFlagRule("not_great", (r"не\s+очень", r"not\s+(?:great|good)")),
    RedFlagRule("poor_fit", (
        r"плохо\s+сидит", r"сидит\s+плохо", r"не\s+подход", r"не\s+сел",
        r"poor\s+fit", r"does\s*n[o']?t\s+fit",
    ), (TAG_FIT,)),
    RedFlagRule("terrible", ("ужасн", "кошмар", "terrible", "awful", "horrible")),
    RedFlagRule("defect", ("брак", "дефект", "defect"), (TAG_QUALITY,)),
    RedFlagRule("broken", (
        "сломал", "сломан", "порвал", "порван", "broken", "torn",
    ), (TAG_QUALITY,)),
    RedFlagRule("not_working", (r"не\s+работа", r"does\s*n[o']?t\s+work", r"not\s+working")),
    RedFlagRule("dirty", ("грязн", "dirty")),
    RedFlagRule("smell", (r"неприятн\w*\s+запах", "воня", "вонь", "smell", "stink")),
    RedFlagRule("rude_staff", ("груб", "хамил", "хамств", "хамск", "rude"), (TAG_SERVICE,)),
    RedFlagRule("too_expensive", (
        r"слишком\s+дорог", r"очень\s+дорог", r"too\s+expensive", "overpriced",
    ), (TAG_PRICE,)),
    RedFlagRule("too_slow", (
        r"слишком\s+долго", r"очень\s+долго", r"too\s+slow",
    )),
    RedFlagRule("disappointed", ("разочаров", "disappoint")),
    RedFlagRule("returns", (
        "возврат", r"верн(?:уть|у|ула|ул|ули)(?!\w)", "обмен",
        "refund", "return", "exchange",
    ), (TAG_RETURNS,)),
)

# Words too generic to be useful as frequency tags
STOP_WORDS: frozenset[str] = frozenset({
    "который", "которая", "которое", "которые", "очень", "просто", "вообще",
    "сейчас", "потому", "когда", "только", "здесь", "этого", "этому", "этой",
    "такой", "такая", "такое", "также", "будет", "можно", "нужно", "всего",
    "вроде", "какой", "какая", "какие", "чтобы", "через", "более", "после",
    "перед", "между", "спасибо", "здравствуйте", "пожалуйста", "магазин",
    "магазине", "магазина", "товар", "товара", "покупка", "покупку", "купила",
    "купил", "хотела", "хотел", "хочется", "сегодня", "вчера", "немного",
    "about", "there", "their", "which", "would", "could", "really", "store",
    "thing", "things", "these", "those", "because",
})

# Test and placeholder utterances removed from summaries
BOILERPLATE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"(?<!\w)это\s+(?:просто\s+)?тест\w*",
        r"(?<!\w)тестов\w*\s+(?:запис\w*|сообщени\w*)",
        r"(?<!\w)проверка\s+(?:связи|микрофона|записи)",
        r"(?<!\w)раз[,\s]+два[,\s]+три(?!\w)",
        r"(?<!\w)один[,\s]+два[,\s]+три(?!\w)",
        r"(?<!\w)(?:this\s+is\s+)?(?:a\s+)?test(?:ing)?\s+recording(?!\w)",
        r"(?<!\w)testing(?:[,\s]+testing)*(?!\w)",
    )
)
