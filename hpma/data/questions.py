"""
HPMA — Question Bank

The static item table: 140 baseline items (HEXACO, motives, affects, validity,
attachment, antagonism) plus 96 contextual clones of the 24 HEXACO sentinel
items.  Built once at import time and exposed as immutable tuples and
read-only mappings.

Id ranges (UI ordering only):

  HEXACO        1-48     two items per facet, odd id forward + sentinel,
                         even id reverse-keyed
  MOTIVES       49-78
  AFFECTS       79-106
  VALIDITY      107-112
  ATTACHMENT    201-212
  ANTAGONISM    301-316
  CONTEXT       401-496  WORK / STRESS / INTIMACY / PUBLIC, 24 each
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from hpma.schemas.questionnaire import QuestionDescriptor

# ──────────────────────────────────────────────────────────────────────────────
# Facet layout
# ──────────────────────────────────────────────────────────────────────────────

HEXACO_DOMAINS: tuple[str, ...] = ("H", "E", "X", "A", "C", "O")

# (facet, domain, facet-id prefix)
_FACET_LAYOUT: tuple[tuple[str, str, str], ...] = (
    ("sincerity", "H", "H_SIN"),
    ("fairness", "H", "H_FAI"),
    ("greed_avoidance", "H", "H_GRE"),
    ("modesty", "H", "H_MOD"),
    ("fearfulness", "E", "E_FEA"),
    ("anxiety", "E", "E_ANX"),
    ("dependence", "E", "E_DEP"),
    ("sentimentality", "E", "E_SEN"),
    ("social_boldness", "X", "X_SOB"),
    ("sociability", "X", "X_SOC"),
    ("liveliness", "X", "X_LIV"),
    ("self_esteem", "X", "X_EST"),
    ("forgivingness", "A", "A_FOR"),
    ("gentleness", "A", "A_GEN"),
    ("flexibility", "A", "A_FLE"),
    ("patience", "A", "A_PAT"),
    ("organization", "C", "C_ORG"),
    ("diligence", "C", "C_DIL"),
    ("perfectionism", "C", "C_PER"),
    ("prudence", "C", "C_PRU"),
    ("aesthetic_appreciation", "O", "O_AES"),
    ("inquisitiveness", "O", "O_INQ"),
    ("creativity", "O", "O_CRE"),
    ("unconventionality", "O", "O_UNC"),
)

HEXACO_FACETS_ORDERED: tuple[str, ...] = tuple(f for f, _, _ in _FACET_LAYOUT)
FACET_TO_DOMAIN: Mapping[str, str] = MappingProxyType({f: d for f, d, _ in _FACET_LAYOUT})

MOTIVES: tuple[str, ...] = ("security", "belonging", "status", "mastery", "autonomy", "purpose")
AFFECTS: tuple[str, ...] = ("seeking", "fear", "anger", "care", "grief", "play", "desire")
ATTACHMENT_DIMENSIONS: tuple[str, ...] = ("anxiety", "avoidance")
ANTAGONISM_AXES: tuple[str, ...] = ("exploitative", "callous", "combative", "image_driven")

CONTEXTS: tuple[str, ...] = ("WORK", "STRESS", "INTIMACY", "PUBLIC")
CONTEXT_START: Mapping[str, int] = MappingProxyType(
    {"WORK": 401, "STRESS": 425, "INTIMACY": 449, "PUBLIC": 473}
)
CONTEXT_STEMS: Mapping[str, str] = MappingProxyType({
    "WORK": "At work or in structured obligations,",
    "STRESS": "When I'm under pressure, overwhelmed, or threatened,",
    "INTIMACY": "In close relationships (partner/close friends/family),",
    "PUBLIC": "When I feel observed, judged, or graded,",
})

# ──────────────────────────────────────────────────────────────────────────────
# Item texts
# ──────────────────────────────────────────────────────────────────────────────

# One (forward, reversed) pair per facet, in _FACET_LAYOUT order.
_HEXACO_TEXTS: tuple[tuple[str, str], ...] = (
    ("I avoid manipulating people, even when it would benefit me.",
     "I would be tempted to bend the rules if I knew I wouldn't be caught."),
    ("I feel uncomfortable taking more credit than I deserve.",
     'I can justify exploiting a "broken system" if it works in my favor.'),
    ("I'd rather be fair than win at someone else's expense.",
     "I sometimes enjoy having power over others."),
    ("If I make a mistake, I try to own it quickly.",
     "I think I'm entitled to special treatment compared to most people."),
    ("I get shaken up by disturbing news or images.",
     "I stay calm in scary or uncertain situations."),
    ("I worry easily about things that might go wrong.",
     "I rarely feel anxious about the future."),
    ("I feel deeply affected by rejection or abandonment.",
     "I'm hard to rattle emotionally."),
    ("I strongly prefer having trusted people close by.",
     "I can detach from emotional situations quickly."),
    ("I enjoy being the one who starts conversations.",
     "I avoid attention whenever possible."),
    ("I like group activities more than solitary ones.",
     "I'm quiet and reserved around most people."),
    ("I naturally bring energy into a room.",
     "I feel drained by social situations more than most people."),
    ("I often feel confident speaking up in groups.",
     "I hesitate to engage unless I'm invited first."),
    ("I can forgive people fairly easily.",
     "When someone annoys me, I hold onto it."),
    ("I try to keep conflicts from escalating.",
     "I often suspect people are being selfish."),
    ("I assume good intent until proven otherwise.",
     "I enjoy arguing just to prove I'm right."),
    ("I stay patient even when people are frustrating.",
     "I'm quick to snap when pushed."),
    ("I keep my life organized enough to avoid last-minute chaos.",
     "I struggle to stick to routines."),
    ("I reliably follow through on what I promise.",
     "I often procrastinate even on important tasks."),
    ("I pay attention to details that others miss.",
     "I'm careless with deadlines."),
    ("I set goals and track progress toward them.",
     "I get bored by planning and prefer winging it."),
    ("I'm moved by art, music, or natural beauty.",
     "I don't see much value in art, philosophy, or new perspectives."),
    ("I enjoy thinking about abstract questions.",
     "I avoid complex topics because they feel pointless."),
    ("I often connect ideas from different areas into something new.",
     "I rarely feel curious about how things work."),
    ("I'm drawn to unfamiliar ideas and experiences.",
     "I prefer familiar routines over novelty."),
)

# subdomain -> [(text, reversed)], five items per motive
_MOTIVE_TEXTS: dict[str, list[tuple[str, bool]]] = {
    "security": [
        ("I plan to reduce risk even if it limits options.", False),
        ("I feel best when life is stable and predictable.", False),
        ('I regularly think about "worst-case scenarios."', False),
        ("I'd rather miss an opportunity than risk a major loss.", False),
        ("I seek environments where I can relax and feel safe.", False),
    ],
    "belonging": [
        ("Feeling included matters to me more than being impressive.", False),
        ("I invest time maintaining relationships even when I'm busy.", False),
        ("I feel uneasy when I'm disconnected from my people.", False),
        ("I'm motivated by being useful to a group.", False),
        ("I prefer cooperation over competition.", False),
    ],
    "status": [
        ("Being respected is a major motivator for me.", False),
        ("I care about how others rank or evaluate me.", False),
        ("I like opportunities to stand out publicly.", False),
        ("I feel driven to build influence or reputation.", False),
        ("I feel energized when I'm admired.", False),
    ],
    "mastery": [
        ("I'm motivated by getting better at difficult skills.", False),
        ('I\'d rather improve than just "look good."', False),
        ("I feel restless when I'm not progressing.", False),
        ("I enjoy challenges that test my ability.", False),
        ("I care a lot about doing things correctly.", False),
    ],
    "autonomy": [
        ("I resist situations where someone controls how I work.", False),
        ("I feel most alive when I choose my own direction.", False),
        ("I prefer flexible rules over strict procedures.", False),
        ("I'd accept less reward to keep independence.", False),
        ("I'm motivated by self-directed goals more than assigned goals.", False),
    ],
    "purpose": [
        ("I want my life to contribute to something bigger than me.", False),
        ("I feel driven by values more than comfort.", False),
        ("I'm willing to sacrifice for a cause I believe in.", False),
        ("Meaning matters to me more than pleasure.", False),
        ("I often ask whether my actions align with my ideals.", False),
    ],
}

# subdomain -> [(text, reversed)], four items per affect system
_AFFECT_TEXTS: dict[str, list[tuple[str, bool]]] = {
    "seeking": [
        ('I feel pulled toward new possibilities and "what could be."', False),
        ("I get excited by starting new projects or adventures.", False),
        ("I get restless when life feels stagnant.", False),
        ("I enjoy exploring options even before committing.", False),
    ],
    "fear": [
        ("I often scan for what might go wrong.", False),
        ("I avoid situations where I might fail publicly.", False),
        ("Uncertainty makes me tense.", False),
        ("I can tolerate risk better than most people.", True),
    ],
    "anger": [
        ("When I feel treated unfairly, anger rises fast.", False),
        ("I stay calm even when I'm disrespected.", True),
        ("I can become confrontational when pushed.", False),
        ('I often feel "hot" irritation under stress.', False),
    ],
    "care": [
        ("I notice when someone is hurting and want to help.", False),
        ("People's pain affects me strongly.", False),
        ("I'm protective of vulnerable people.", False),
        ("I can ignore others' problems without much guilt.", True),
    ],
    "grief": [
        ("I feel strong distress when relationships feel threatened.", False),
        ("I fear being left out or abandoned more than most people.", False),
        ("I recover quickly from social loss or rejection.", True),
        ('I get a heavy "loss feeling" even from small goodbyes.', False),
    ],
    "play": [
        ("I like joking, playfulness, and light competition.", False),
        ("I bring humor into tense situations.", False),
        ("I feel uncomfortable being silly in public.", True),
        ("I get energized by fun group momentum.", False),
    ],
    "desire": [
        ("I notice attraction quickly.", False),
        ("Desire strongly influences my choices sometimes.", False),
        ("I rarely feel romantic or attraction-related motivation.", True),
        ("I feel a strong pull toward bonding/intimacy.", False),
    ],
}

# (id, facet-id, text, subdomain)
_VALIDITY_ITEMS: tuple[tuple[int, str, str, str], ...] = (
    (107, "V_IDE_01", "I have never told a lie in my entire life.", "idealized"),
    (108, "V_NOR_01", "I sometimes feel jealous.", "normal"),
    (109, "V_IDE_02", "I always stay perfectly calm no matter what.", "idealized"),
    (110, "V_NOR_02", "I have had at least one conflict with someone in the past year.", "normal"),
    (111, "V_ATT_01", "I read every statement carefully before answering.", "attentiveness"),
    (112, "V_RAN_01", "I answered some questions randomly.", "random"),
)

_ATTACHMENT_TEXTS: dict[str, list[str]] = {
    "anxiety": [
        "I worry that partners will leave me.",
        "I need a lot of reassurance that I'm loved.",
        "I often feel insecure about where I stand with people close to me.",
        "I get very upset when others don't respond to me quickly.",
        "I fear being rejected by those I care about.",
        "I often wonder if people really care about me.",
    ],
    "avoidance": [
        "I find it difficult to depend on others.",
        "I prefer not to show others how I feel deep down.",
        "I am uncomfortable being too close to others.",
        "I pull away when relationships get too intimate.",
        "I try to avoid getting too emotionally invested in others.",
        "I feel uncomfortable when others want to be very close.",
    ],
}

_ANTAGONISM_TEXTS: dict[str, list[str]] = {
    "exploitative": [
        "I use people to get what I want.",
        "I can be charming to manipulate situations.",
        "I don't mind using flattery to get my way.",
        "I know how to leverage others' weaknesses.",
    ],
    "callous": [
        "I don't feel much when others are hurt.",
        "I'm rarely moved by others' suffering.",
        "People say I'm cold or insensitive.",
        "I can watch others struggle without feeling the need to help.",
    ],
    "combative": [
        "I enjoy arguments and winning debates.",
        "I don't back down from confrontations.",
        "I tend to react aggressively when challenged.",
        "I sometimes provoke others to see how they react.",
    ],
    "image_driven": [
        "I need others to see me as impressive.",
        "I often exaggerate my accomplishments.",
        "I feel slighted when I don't get special treatment.",
        "I deserve more recognition than I get.",
    ],
}

_CODES: dict[str, str] = {
    "security": "M_SEC", "belonging": "M_BEL", "status": "M_STA",
    "mastery": "M_MAS", "autonomy": "M_AUT", "purpose": "M_PUR",
    "seeking": "AF_SEE", "fear": "AF_FEA", "anger": "AF_ANG", "care": "AF_CAR",
    "grief": "AF_GRI", "play": "AF_PLA", "desire": "AF_DES",
    "anxiety": "AT_ANX", "avoidance": "AT_AVO",
    "exploitative": "AN_EXP", "callous": "AN_CAL",
    "combative": "AN_COM", "image_driven": "AN_IMG",
}


# ──────────────────────────────────────────────────────────────────────────────
# Builders
# ──────────────────────────────────────────────────────────────────────────────


def _build_hexaco() -> list[QuestionDescriptor]:
    items: list[QuestionDescriptor] = []
    for index, ((facet, domain, prefix), (forward, reverse)) in enumerate(
        zip(_FACET_LAYOUT, _HEXACO_TEXTS)
    ):
        first_id = 2 * index + 1
        items.append(QuestionDescriptor(
            id=first_id, facet_id=f"{prefix}_01", text=forward, module="hexaco",
            domain=domain, subdomain=facet, reversed=False, context_sentinel=True,
        ))
        items.append(QuestionDescriptor(
            id=first_id + 1, facet_id=f"{prefix}_02", text=reverse, module="hexaco",
            domain=domain, subdomain=facet, reversed=True,
        ))
    return items


def _build_module(
    texts: dict[str, list[tuple[str, bool]]], module: str, start_id: int
) -> list[QuestionDescriptor]:
    items: list[QuestionDescriptor] = []
    qid = start_id
    for subdomain, entries in texts.items():
        for n, (text, reversed_) in enumerate(entries, start=1):
            items.append(QuestionDescriptor(
                id=qid, facet_id=f"{_CODES[subdomain]}_{n:02d}", text=text,
                module=module, domain=module, subdomain=subdomain, reversed=reversed_,
            ))
            qid += 1
    return items


def _forward(texts: dict[str, list[str]]) -> dict[str, list[tuple[str, bool]]]:
    return {sub: [(t, False) for t in entries] for sub, entries in texts.items()}


def _build_validity() -> list[QuestionDescriptor]:
    return [
        QuestionDescriptor(
            id=qid, facet_id=facet_id, text=text, module="validity",
            domain="validity", subdomain=subdomain,
        )
        for qid, facet_id, text, subdomain in _VALIDITY_ITEMS
    ]


def _build_context_items(sentinels: tuple[QuestionDescriptor, ...]) -> list[QuestionDescriptor]:
    """Clone each sentinel once per context, forward-keyed, stem-prefixed."""
    items: list[QuestionDescriptor] = []
    for ctx in CONTEXTS:
        for offset, sentinel in enumerate(sentinels):
            items.append(QuestionDescriptor(
                id=CONTEXT_START[ctx] + offset,
                facet_id=sentinel.facet_id,
                text=f"{CONTEXT_STEMS[ctx]} {sentinel.text}",
                module="context",
                domain=sentinel.domain,
                subdomain=sentinel.subdomain,
                reversed=False,
                context=ctx,
            ))
    return items


BASELINE_QUESTIONS: tuple[QuestionDescriptor, ...] = tuple(
    _build_hexaco()
    + _build_module(_MOTIVE_TEXTS, "motive", 49)
    + _build_module(_AFFECT_TEXTS, "affect", 79)
    + _build_validity()
    + _build_module(_forward(_ATTACHMENT_TEXTS), "attachment", 201)
    + _build_module(_forward(_ANTAGONISM_TEXTS), "antagonism", 301)
)

SENTINEL_QUESTIONS: tuple[QuestionDescriptor, ...] = tuple(
    q for q in BASELINE_QUESTIONS if q.context_sentinel
)

CONTEXT_QUESTIONS: tuple[QuestionDescriptor, ...] = tuple(
    _build_context_items(SENTINEL_QUESTIONS)
)

ALL_QUESTIONS: tuple[QuestionDescriptor, ...] = BASELINE_QUESTIONS + CONTEXT_QUESTIONS

QUESTIONS_BY_ID: Mapping[int, QuestionDescriptor] = MappingProxyType(
    {q.id: q for q in ALL_QUESTIONS}
)


# ──────────────────────────────────────────────────────────────────────────────
# Lookups
# ──────────────────────────────────────────────────────────────────────────────


def get_question(question_id: int) -> QuestionDescriptor:
    """Return the descriptor for *question_id*; ``LookupError`` if unknown."""
    try:
        return QUESTIONS_BY_ID[question_id]
    except KeyError:
        raise LookupError(f"No question with id {question_id}") from None


def questions_by_module(module: str) -> tuple[QuestionDescriptor, ...]:
    return tuple(q for q in ALL_QUESTIONS if q.module == module)


def questions_by_context(context: str) -> tuple[QuestionDescriptor, ...]:
    return tuple(q for q in CONTEXT_QUESTIONS if q.context == context)
