"""Read-only lookup tables for the local simulation path.

Department keywords, distress keywords, response templates and the seed
case queue, modelled on Andhra Pradesh PGRS grievance patterns.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

DEPARTMENT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Social Welfare": ("pension", "పెన్షన్", "welfare", "సంక్షేమ", "widow", "old age", "disability"),
    "Revenue": ("land", "భూమి", "patta", "పట్టా", "survey", "encroachment", "ఆక్రమణ"),
    "Municipal Administration": ("water", "నీటి", "road", "రోడ్డు", "drainage", "street light", "వీధి లైట్"),
    "Police": ("theft", "దొంగతనం", "fir", "police", "పోలీస్", "complaint"),
    "Civil Supplies": ("ration", "రేషన్", "rice", "బియ్యం", "kerosene", "card"),
    "Education": ("school", "స్కూల్", "teacher", "టీచర్", "education", "విద్య"),
    "Health": ("hospital", "ఆసుపత్రి", "doctor", "medicine", "health", "ఆరోగ్య"),
    "Housing": ("house", "ఇల్లు", "site", "స్థలం", "housing", "గృహ"),
}

# Used when no department keyword matches at all
UNMATCHED_TOP3: tuple[tuple[str, float], ...] = (
    ("Revenue", 0.45),
    ("Municipal Administration", 0.32),
    ("Social Welfare", 0.23),
)


@dataclass(frozen=True)
class DistressKeyword:
    telugu: str
    english: str
    sla_hours: int

    @property
    def label(self) -> str:
        return f"{self.telugu} ({self.english})"

    def found_in(self, text: str) -> bool:
        return self.telugu in text or self.english in text.lower()


DISTRESS_KEYWORDS: dict[str, tuple[DistressKeyword, ...]] = {
    "CRITICAL": (
        DistressKeyword("ఆత్మహత్య", "suicide", 24),
        DistressKeyword("చనిపోతున్నాము", "dying", 24),
        DistressKeyword("ఆకలి", "starvation", 24),
        DistressKeyword("ప్రాణాలు పోతున్నాయి", "lives at risk", 24),
        DistressKeyword("అత్యవసర", "emergency", 24),
    ),
    "HIGH": (
        DistressKeyword("నెలలుగా", "months pending", 72),
        DistressKeyword("రాలేదు", "not received", 72),
        DistressKeyword("అత్యవసరంగా", "urgently needed", 72),
        DistressKeyword("జీవితం భరించలేను", "can't bear life", 72),
        DistressKeyword("ఎక్కడికి వెళ్ళాలో తెలియదు", "don't know where to go", 72),
    ),
    "MEDIUM": (
        DistressKeyword("సమస్య", "problem", 168),
        DistressKeyword("పని జరగలేదు", "work not done", 168),
        DistressKeyword("సమాధానం రాలేదు", "no response", 168),
        DistressKeyword("చాలా రోజులు", "many days waiting", 168),
    ),
}

CASE_ID_PLACEHOLDER = "#{caseId}"

RESPONSE_TEMPLATES: dict[str, dict[str, str]] = {
    "CRITICAL": {
        "english": (
            "We understand this is an extremely urgent situation. Your case #{caseId} has been marked "
            "CRITICAL and will receive immediate attention. A senior officer will contact you within "
            "24 hours. Please stay strong - help is on the way."
        ),
        "telugu": (
            "ఇది అత్యంత అత్యవసర పరిస్థితి అని మాకు అర్థమైంది. మీ కేసు #{caseId} క్రిటికల్‌గా గుర్తించబడింది "
            "మరియు వెంటనే దృష్టి పెట్టబడుతుంది. సీనియర్ అధికారి 24 గంటల్లో మీకు ఫోన్ చేస్తారు."
        ),
    },
    "HIGH": {
        "english": (
            "Your grievance #{caseId} has been registered with HIGH priority. We take your concern "
            "seriously and will resolve it within 3 days. You will receive updates via WhatsApp."
        ),
        "telugu": (
            "మీ ఫిర్యాదు #{caseId} అధిక ప్రాధాన్యతతో నమోదు చేయబడింది. మేము మీ ఆందోళనను తీవ్రంగా "
            "తీసుకుంటాము మరియు 3 రోజుల్లో పరిష్కరిస్తాము."
        ),
    },
    "MEDIUM": {
        "english": (
            "Your grievance #{caseId} has been successfully registered. Our team will review and "
            "respond within 7 days. Track status anytime using your case ID."
        ),
        "telugu": "మీ ఫిర్యాదు #{caseId} విజయవంతంగా నమోదు చేయబడింది. మా బృందం 7 రోజుల్లో సమీక్షించి స్పందిస్తుంది.",
    },
    "NORMAL": {
        "english": (
            "Your grievance #{caseId} has been registered. Expected resolution time is 14 days. "
            "You can track the status using your case ID."
        ),
        "telugu": "మీ ఫిర్యాదు #{caseId} నమోదు చేయబడింది. ఊహించిన పరిష్కార సమయం 14 రోజులు.",
    },
}

DEFAULT_RESPONSE_TEMPLATE: dict[str, str] = {
    "english": "Your grievance has been registered. We will respond within the SLA period.",
    "telugu": "మీ ఫిర్యాదు నమోదు చేయబడింది. SLA వ్యవధిలో స్పందిస్తాము.",
}

SIMILAR_CASE_RESOLUTIONS: tuple[tuple[float, str], ...] = (
    (0.87, "PFMS portal update - Bank account mismatch"),
    (0.74, "Document verification at local office"),
)

LIKELY_LAPSES: tuple[str, ...] = ("No Direct Contact", "Wrong/Blank Closure")

ALL_DEPARTMENTS: tuple[str, ...] = (
    "Revenue (CCLA)",
    "Survey & Land Records",
    "Roads & Buildings",
    "Police",
    "Panchayati Raj",
    "Municipal Administration",
    "Social Welfare",
    "Civil Supplies",
    "Agriculture",
    "Health",
    "Education",
    "Energy",
    "Water Resources",
    "Housing",
    "Transport",
    "Finance",
    "Women & Child Welfare",
    "Tribal Welfare",
    "BC Welfare",
    "Fisheries",
)

# Departments the simulated classifier can emit that are not spelled the
# same way in ALL_DEPARTMENTS
KNOWN_DEPARTMENTS: frozenset[str] = frozenset(ALL_DEPARTMENTS) | frozenset(DEPARTMENT_KEYWORDS) | {"Revenue"}


def _seed(
    case_id: str,
    text: str,
    text_telugu: str,
    department: str,
    distress_level: str,
    confidence: float,
    lapse_risk: float,
    sla_hours: int,
    status: str,
    citizen_name: str,
    district: str,
    mandal: str,
    submitted_at: str,
    distress_signals: tuple[str, ...] = (),
    similar_cases: tuple[tuple[str, float, str], ...] = (),
) -> dict[str, Any]:
    return {
        "id": case_id,
        "text": text,
        "text_telugu": text_telugu,
        "department": department,
        "distress_level": distress_level,
        "confidence": confidence,
        "lapse_risk": lapse_risk,
        "sla_hours": sla_hours,
        "status": status,
        "citizen_name": citizen_name,
        "district": district,
        "mandal": mandal,
        "submitted_at": datetime.fromisoformat(submitted_at),
        "distress_signals": list(distress_signals),
        "similar_cases": [
            {"id": cid, "similarity": sim, "resolution": res} for cid, sim, res in similar_cases
        ],
    }


SEED_CASES: tuple[dict[str, Any], ...] = (
    _seed(
        "PGRS-2025-ANT-001",
        "My pension has not been received for 6 months, children have nothing to eat",
        "pension 6 నెలలు రాలేదు, పిల్లలకు తినడానికి ఏమీ లేదు",
        "Social Welfare", "CRITICAL", 0.845, 0.72, 24, "pending",
        "Lakshmi Devi", "Ananthapur", "Kadiri", "2025-11-26T08:30:00+05:30",
        ("ఆకలి (starvation)", "నెలలుగా (months)"),
        (
            ("PGRS-2025-ANT-089", 0.87, "PFMS portal update - Bank account mismatch fixed"),
            ("PGRS-2025-GTR-234", 0.82, "Aadhaar seeding correction at UIDAI"),
        ),
    ),
    _seed(
        "PGRS-2025-GTR-002",
        "Land survey dispute - neighbor has encroached on my property by 10 feet",
        "భూమి సర్వే వివాదం - పొరుగువారు నా ఆస్తిపై 10 అడుగులు ఆక్రమించారు",
        "Survey & Land Records", "HIGH", 0.78, 0.58, 72, "pending",
        "Ramaiah Naidu", "Guntur", "Pedakakani", "2025-11-26T07:15:00+05:30",
        similar_cases=(
            ("PGRS-2025-GTR-156", 0.79, "Joint survey with both parties - boundary stones placed"),
        ),
    ),
    _seed(
        "PGRS-2025-VSP-003",
        "No water supply for 2 weeks in our ward",
        "మా వార్డులో 2 వారాలుగా నీటి సరఫరా లేదు",
        "Municipal Administration", "HIGH", 0.92, 0.35, 72, "in_progress",
        "Suresh Kumar", "Visakhapatnam", "Gajuwaka", "2025-11-25T14:20:00+05:30",
        ("2 వారాలుగా (2 weeks)",),
    ),
    _seed(
        "PGRS-2025-KKD-004",
        "Ration card not updated after adding new family member",
        "కొత్త కుటుంబ సభ్యుడిని జోడించిన తర్వాత రేషన్ కార్డు అప్‌డేట్ కాలేదు",
        "Civil Supplies", "MEDIUM", 0.88, 0.22, 168, "pending",
        "Padma Rani", "Kakinada", "Pithapuram", "2025-11-26T09:45:00+05:30",
    ),
    _seed(
        "PGRS-2025-WGD-005",
        "Police not registering FIR for theft in my house",
        "నా ఇంట్లో దొంగతనానికి పోలీసులు FIR నమోదు చేయడం లేదు",
        "Police", "HIGH", 0.91, 0.48, 72, "pending",
        "Venkat Rao", "West Godavari", "Bhimavaram", "2025-11-26T06:30:00+05:30",
    ),
    _seed(
        "PGRS-2025-NLR-006",
        "Teacher absent for 2 months in government school",
        "ప్రభుత్వ పాఠశాలలో ఉపాధ్యాయుడు 2 నెలలుగా గైర్హాజరు",
        "Education", "MEDIUM", 0.86, 0.31, 168, "pending",
        "Srinivas Reddy", "Nellore", "Kavali", "2025-11-25T16:00:00+05:30",
    ),
    _seed(
        "PGRS-2025-KRS-007",
        "Street light not working for 3 months - safety concern for women",
        "వీధి లైట్లు 3 నెలలుగా పని చేయడం లేదు - మహిళల భద్రత సమస్య",
        "Municipal Administration", "HIGH", 0.89, 0.42, 72, "pending",
        "Anitha Kumari", "Krishna", "Vijayawada Urban", "2025-11-26T10:15:00+05:30",
        ("భద్రత (safety)", "3 నెలలుగా (3 months)"),
    ),
    _seed(
        "PGRS-2025-PKM-008",
        "House site allocation pending for 5 years",
        "ఇంటి స్థలం కేటాయింపు 5 సంవత్సరాలుగా పెండింగ్‌లో ఉంది",
        "Housing", "MEDIUM", 0.82, 0.55, 168, "pending",
        "Raju Yadav", "Prakasam", "Ongole", "2025-11-25T11:30:00+05:30",
    ),
)
