"""Static reference data and the seed handbook.

Everything here is read-only and loaded once at import time. The seed
handbook is rebuilt from the crop and natural-input records so the two
views of the same material cannot drift apart.
"""

from typing import Optional

from prakriti.models import (
    FAQ,
    Category,
    Crop,
    Handbook,
    Item,
    NaturalInput,
    Screen,
    Section,
)


PLACEHOLDER_IMAGE_URL = "https://picsum.photos/seed/{seed}/400/300"


def placeholder_image(seed: str) -> str:
    """Build a placeholder image URL that is distinct per seed."""
    return PLACEHOLDER_IMAGE_URL.format(seed=seed)


CROPS: tuple[Crop, ...] = (
    Crop(
        id="rice",
        name="Rice",
        localized_name="వరి",
        description="వరి సాగులో ప్రకృతి వ్యవసాయ పద్ధతులు.",
        sowing_time="ఖరీఫ్ మరియు రబీ",
        pest_management=("కాండం తొలిచే పురుగు", "ఆకు ముడత పురుగు", "సుడి దోమ"),
    ),
    Crop(
        id="groundnut",
        name="Groundnut",
        localized_name="వేరుశనగ",
        description="వేరుశనగ సాగులో ప్రకృతి వ్యవసాయ పద్ధతులు.",
        sowing_time="ఖరీఫ్",
        pest_management=("ఎర్ర గొంగళి పురుగు", "వేరు పురుగు"),
    ),
    Crop(
        id="cotton",
        name="Cotton",
        localized_name="పత్తి",
        description="పత్తి సాగులో ప్రకృతి వ్యవసాయ పద్ధతులు.",
        sowing_time="ఖరీఫ్",
        pest_management=("గులాబీ రంగు పురుగు", "శనగ పచ్చ పురుగు"),
    ),
)

NATURAL_INPUTS: tuple[NaturalInput, ...] = (
    NaturalInput(
        id="beejamrutham",
        name="Beejamrutham",
        localized_name="బీజామృతం",
        ingredients=("ఆవు పేడ", "ఆవు మూత్రం", "సున్నం", "మట్టి", "నీరు"),
        preparation=(
            "విత్తన శుద్ధి కోసం ఉపయోగిస్తారు. ఆవు పేడ, మూత్రం, సున్నం మరియు "
            "మట్టిని నీటిలో కలిపి 24 గంటలు ఉంచాలి."
        ),
        usage="విత్తనాలను ఈ ద్రావణంలో ముంచి ఆరబెట్టి నాటుకోవాలి.",
    ),
    NaturalInput(
        id="jeevamrutham",
        name="Jeevamrutham",
        localized_name="జీవామృతం",
        ingredients=("ఆవు పేడ", "ఆవు మూత్రం", "బెల్లం", "పిండి", "మట్టి", "నీరు"),
        preparation=(
            "200 లీటర్ల నీటిలో 10 కిలోల ఆవు పేడ, 10 లీటర్ల మూత్రం, 2 కిలోల "
            "బెల్లం, 2 కిలోల పిండి మరియు గుప్పెడు మట్టి కలిపి 2-3 రోజులు "
            "మురగబెట్టాలి."
        ),
        usage="నీటితో కలిపి పొలానికి పారించాలి లేదా పిచికారీ చేయాలి.",
    ),
    NaturalInput(
        id="neemastram",
        name="Neemastram",
        localized_name="నీమాస్త్రం",
        ingredients=("ఆవు పేడ", "ఆవు మూత్రం", "వేప ఆకులు", "నీరు"),
        preparation="వేప ఆకులను నూరి ఆవు పేడ, మూత్రంతో కలిపి 48 గంటలు ఉంచాలి.",
        usage="రసం పీల్చే పురుగుల నివారణకు పిచికారీ చేయాలి.",
    ),
)

FAQS: tuple[FAQ, ...] = (
    FAQ(
        question="ప్రకృతి వ్యవసాయం అంటే ఏమిటి?",
        answer=(
            "ప్రకృతి వ్యవసాయం అనేది బాహ్య వ్యవసాయ రసాయనాలను ఉపయోగించకుండా పంట "
            "ఉత్పాదకత మరియు నాణ్యతను మెరుగుపరచడానికి ప్రకృతి ప్రక్రియలపై "
            "ఆధారపడిన వ్యవసాయ పద్ధతుల సమితి."
        ),
    ),
    FAQ(
        question="జీవామృతం వల్ల కలిగే లాభాలు ఏమిటి?",
        answer=(
            "జీవామృతం నేలలోని సూక్ష్మజీవుల వృద్ధికి దోహదపడుతుంది. ఇది ఒక జీవ "
            "ఉత్ప్రేరకంగా పనిచేస్తుంది మరియు నేలలోని సూక్ష్మజీవుల వైవిధ్యాన్ని "
            "పెంపొందించడంలో సహాయపడతాయి."
        ),
    ),
    FAQ(
        question="ఆచ్ఛాదన (Mulching) ఎందుకు చేయాలి?",
        answer=(
            "నేల నుండి తేమ ఆవిరిని తగ్గించడానికి మరియు నేల ఉష్ణోగ్రతను "
            "నియంత్రించడానికి ఆచ్ఛాదన ముఖ్యం. ఇది నేల ఆరోగ్యాన్ని కాపాడుతుంది."
        ),
    ),
)

DAILY_TIP = (
    "బీజామృతం విత్తన శుద్ధికి చాలా ముఖ్యం. ఇది విత్తనాల ద్వారా వచ్చే తెగుళ్లను "
    "అరికడుతుంది. నాటు వేయడానికి ముందు విత్తనాలను బీజామృతంతో శుద్ధి చేయడం "
    "మర్చిపోకండి."
)


def get_crop(crop_id: str) -> Optional[Crop]:
    """Look up a crop record by id."""
    for crop in CROPS:
        if crop.id == crop_id:
            return crop
    return None


def get_natural_input(input_id: str) -> Optional[NaturalInput]:
    """Look up a natural-input record by id."""
    for natural_input in NATURAL_INPUTS:
        if natural_input.id == input_id:
            return natural_input
    return None


def _crop_item(crop: Crop) -> Item:
    return Item(
        id=crop.id,
        name=crop.localized_name,
        screen=Screen.CROPS,
        image=placeholder_image(crop.id),
        sections=(
            Section(id="about", title="వివరణ", content=crop.description),
            Section(id="sowing", title="నాటు సమయం", content=crop.sowing_time),
            Section(
                id="pests",
                title="పురుగుల నివారణ",
                content="\n".join(f"- {pest}" for pest in crop.pest_management),
            ),
        ),
    )


def _input_item(natural_input: NaturalInput) -> Item:
    return Item(
        id=natural_input.id,
        name=natural_input.localized_name,
        screen=Screen.INPUTS,
        image=placeholder_image(natural_input.id),
        sections=(
            Section(
                id="ingredients",
                title="కావలసిన పదార్థాలు",
                content="\n".join(f"- {ing}" for ing in natural_input.ingredients),
            ),
            Section(id="preparation", title="తయారీ విధానం", content=natural_input.preparation),
            Section(id="usage", title="వాడుక", content=natural_input.usage),
        ),
    )


def _faq_item(index: int, faq: FAQ) -> Item:
    return Item(
        id=f"faq-{index}",
        name=faq.question,
        screen=Screen.FAQS,
        image=None,
        sections=(Section(id="answer", title="జవాబు", content=faq.answer),),
    )


SEED_HANDBOOK = Handbook(
    categories=(
        Category(id="1", name="పంటలు", items=tuple(_crop_item(c) for c in CROPS)),
        Category(id="2", name="కషాయాలు", items=tuple(_input_item(n) for n in NATURAL_INPUTS)),
        Category(
            id="3",
            name="సూత్రాలు",
            items=tuple(_faq_item(i, f) for i, f in enumerate(FAQS, start=1)),
        ),
    )
)
