"""Rule-based clarifying questions for low-confidence classifications.

No model calls: ambiguity is detected from the top-ranked departments and a
few keywords that usually hide the real department.
"""

from __future__ import annotations

from pydantic import BaseModel

from dhruva.domain.pipeline.models import DepartmentScore

MAX_QUESTIONS = 2
CLOSE_CALL_MARGIN = 0.15


class ClarifyingOption(BaseModel):
    label: str
    telugu: str
    target_department: str
    boost: float


class ClarifyingQuestion(BaseModel):
    question: str
    telugu: str
    options: list[ClarifyingOption]


def _option(label: str, telugu: str, target: str, boost: float) -> ClarifyingOption:
    return ClarifyingOption(label=label, telugu=telugu, target_department=target, boost=boost)


# (first marker, second marker, question) for department pairs that are often confused
_AMBIGUOUS_PAIRS: tuple[tuple[str, str, ClarifyingQuestion], ...] = (
    (
        "Revenue",
        "Survey",
        ClarifyingQuestion(
            question="Is this about land ownership (patta) or boundary survey?",
            telugu="ఇది భూమి యాజమాన్యం (పట్టా) లేదా సరిహద్దు సర్వే గురించా?",
            options=[
                _option("Land ownership/patta issue", "భూమి యాజమాన్యం/పట్టా సమస్య", "Revenue (CCLA)", 0.2),
                _option("Boundary/survey dispute", "సరిహద్దు/సర్వే వివాదం", "Survey & Land Records", 0.2),
            ],
        ),
    ),
    (
        "Municipal",
        "Panchayat",
        ClarifyingQuestion(
            question="Is this in an urban area (town/city) or rural village?",
            telugu="ఇది పట్టణ ప్రాంతం (టౌన్/సిటీ) లేదా గ్రామీణ గ్రామంలో ఉందా?",
            options=[
                _option("Urban/Town/City", "పట్టణం/టౌన్/సిటీ", "Municipal Administration", 0.2),
                _option("Rural/Village", "గ్రామీణ/గ్రామం", "Panchayati Raj", 0.2),
            ],
        ),
    ),
    (
        "Social",
        "Civil",
        ClarifyingQuestion(
            question="Is this about pension/scheme benefits or ration/food supplies?",
            telugu="ఇది పెన్షన్/పథకం ప్రయోజనాలు లేదా రేషన్/ఆహార సరఫరాల గురించా?",
            options=[
                _option("Pension/Scheme benefits", "పెన్షన్/పథకం ప్రయోజనాలు", "Social Welfare", 0.2),
                _option("Ration/Food supplies", "రేషన్/ఆహార సరఫరాలు", "Civil Supplies", 0.2),
            ],
        ),
    ),
)

_PAYMENT_QUESTION = ClarifyingQuestion(
    question="What type of payment is this about?",
    telugu="ఇది ఏ రకమైన చెల్లింపు గురించి?",
    options=[
        _option("Pension/Welfare scheme", "పెన్షన్/సంక్షేమ పథకం", "Social Welfare", 0.15),
        _option("Government contract/salary", "ప్రభుత్వ కాంట్రాక్ట్/జీతం", "Finance", 0.15),
        _option("Land compensation", "భూమి పరిహారం", "Revenue (CCLA)", 0.15),
    ],
)

_CERTIFICATE_QUESTION = ClarifyingQuestion(
    question="What type of certificate do you need?",
    telugu="మీకు ఏ రకమైన సర్టిఫికేట్ కావాలి?",
    options=[
        _option("Caste/Income certificate", "కులం/ఆదాయ సర్టిఫికేట్", "Revenue (CCLA)", 0.2),
        _option("Birth/Death certificate", "జనన/మరణ సర్టిఫికేట్", "Municipal Administration", 0.2),
        _option("Land/Property certificate", "భూమి/ఆస్తి సర్టిఫికేట్", "Survey & Land Records", 0.2),
    ],
)

_DEFAULT_QUESTIONS: tuple[ClarifyingQuestion, ...] = (
    ClarifyingQuestion(
        question="Could you describe the specific problem?",
        telugu="నిర్దిష్ట సమస్యను వివరించగలరా?",
        options=[],
    ),
    ClarifyingQuestion(
        question="How long has this issue been pending?",
        telugu="ఈ సమస్య ఎంత కాలంగా పెండింగ్‌లో ఉంది?",
        options=[],
    ),
)


def clarifying_questions(text: str, top3: list[DepartmentScore] | tuple[DepartmentScore, ...]) -> list[ClarifyingQuestion]:
    questions: list[ClarifyingQuestion] = []
    lowered = text.lower()

    if len(top3) >= 2 and top3[0].confidence - top3[1].confidence < CLOSE_CALL_MARGIN:
        pair = (top3[0].department, top3[1].department)
        for first, second, question in _AMBIGUOUS_PAIRS:
            if any(first in dept for dept in pair) and any(second in dept for dept in pair):
                questions.append(question)

    if "money" in lowered or "payment" in lowered or "డబ్బు" in text:
        if not any("pension" in q.question for q in questions):
            questions.append(_PAYMENT_QUESTION)

    if "certificate" in lowered or "సర్టిఫికేట్" in text:
        questions.append(_CERTIFICATE_QUESTION)

    if not questions:
        questions.extend(_DEFAULT_QUESTIONS)

    return [q.model_copy(deep=True) for q in questions[:MAX_QUESTIONS]]
