# --- Configuration --------------------------------------------------------------------------------

import os

from dotenv import load_dotenv

from models import Category, Domain

CATEGORIES = list(Category)

CATEGORY_LABELS = {
    Category.FINANCIAL: "Financials",
    Category.OWNER_DEPENDENCY: "Owner Dependency",
    Category.ASSETS: "Assets",
    Category.LEGAL: "Legal",
    Category.MARKETING: "Marketing",
    Category.PRESENTATION: "Presentation",
}

# Fixed membership; division is always by the member count, answered or not.
CATEGORY_QUESTIONS = {
    Category.FINANCIAL: [
        "financial_statements",
        "expense_separation",
        "cash_flow",
        "financing_ready",
    ],
    Category.OWNER_DEPENDENCY: [
        "owner_dependency",
        "employee_management",
        "written_procedures",
    ],
    Category.ASSETS: ["physical_assets", "intangible_assets", "asset_management"],
    Category.LEGAL: ["contracts_updated", "licenses", "legal_risks"],
    Category.MARKETING: ["loyal_customers", "crm_data", "marketing_plan"],
    Category.PRESENTATION: ["ready_to_show", "teaser_ready", "kpis_available"],
}

# "don't know" scores next to the negative pole, not the midpoint.
DOMAIN_SCORES = {
    Domain.TERNARY: {"yes": 5, "no": 1, "dont_know": 2},
    Domain.FIVE_POINT: {
        "excellent": 5,
        "good": 4,
        "average": 3,
        "poor": 2,
        "very_poor": 1,
    },
}

YES_NO_ROUGHLY = [
    {"label": "Yes", "value": "yes"},
    {"label": "No", "value": "no"},
    {"label": "Roughly", "value": "dont_know"},
]

# 19 questions in stepper order. Labels vary per question, tokens never do.
QUESTIONS = [
    # Financials
    {
        "key": "financial_statements",
        "category": Category.FINANCIAL,
        "domain": Domain.TERNARY,
        "prompt": "Does the business have organized financial statements for the last three years?",
        "options": YES_NO_ROUGHLY,
    },
    {
        "key": "expense_separation",
        "category": Category.FINANCIAL,
        "domain": Domain.TERNARY,
        "prompt": "Is there a clear separation between personal expenses and business expenses?",
        "options": YES_NO_ROUGHLY,
    },
    {
        "key": "cash_flow",
        "category": Category.FINANCIAL,
        "domain": Domain.TERNARY,
        "prompt": "Does the business have a positive and stable cash flow?",
        "options": [
            {"label": "Yes", "value": "yes"},
            {"label": "No", "value": "no"},
            {"label": "It depends", "value": "dont_know"},
        ],
    },
    {
        "key": "financing_ready",
        "category": Category.FINANCIAL,
        "domain": Domain.TERNARY,
        "prompt": "Does the business report in a way that would let a buyer obtain financing?",
        "options": YES_NO_ROUGHLY,
    },
    # Owner dependency
    {
        "key": "owner_dependency",
        "category": Category.OWNER_DEPENDENCY,
        "domain": Domain.FIVE_POINT,
        "prompt": "How much does the business rely on you in day-to-day management?",
        "options": [
            {"label": "Not at all", "value": "excellent"},
            {"label": "A little", "value": "good"},
            {"label": "A lot", "value": "poor"},
            {"label": "I am the business", "value": "very_poor"},
        ],
    },
    {
        "key": "employee_management",
        "category": Category.OWNER_DEPENDENCY,
        "domain": Domain.TERNARY,
        "prompt": "Are there employees who could keep running part of the operation?",
        "options": YES_NO_ROUGHLY,
    },
    {
        "key": "written_procedures",
        "category": Category.OWNER_DEPENDENCY,
        "domain": Domain.TERNARY,
        "prompt": "Are there written procedures for the core processes of the business?",
        "options": YES_NO_ROUGHLY,
    },
    # Assets
    {
        "key": "physical_assets",
        "category": Category.ASSETS,
        "domain": Domain.TERNARY,
        "prompt": "Does the business hold significant physical assets (inventory, equipment, real estate)?",
        "options": YES_NO_ROUGHLY,
    },
    {
        "key": "intangible_assets",
        "category": Category.ASSETS,
        "domain": Domain.TERNARY,
        "prompt": "Does the business have intangible assets (brand, website, goodwill)?",
        "options": YES_NO_ROUGHLY,
    },
    {
        "key": "asset_management",
        "category": Category.ASSETS,
        "domain": Domain.TERNARY,
        "prompt": "Are all assets recorded and managed clearly?",
        "options": YES_NO_ROUGHLY,
    },
    # Legal
    {
        "key": "contracts_updated",
        "category": Category.LEGAL,
        "domain": Domain.TERNARY,
        "prompt": "Are all contracts with suppliers, employees and customers up to date and signed?",
        "options": YES_NO_ROUGHLY,
    },
    {
        "key": "licenses",
        "category": Category.LEGAL,
        "domain": Domain.TERNARY,
        "prompt": "Does the business hold every license it needs to operate?",
        "options": YES_NO_ROUGHLY,
    },
    {
        "key": "legal_risks",
        "category": Category.LEGAL,
        "domain": Domain.TERNARY,
        "prompt": "Is the business free of known lawsuits or legal risks?",
        "options": YES_NO_ROUGHLY,
    },
    # Marketing
    {
        "key": "loyal_customers",
        "category": Category.MARKETING,
        "domain": Domain.TERNARY,
        "prompt": "Does the business have a loyal, returning customer base?",
        "options": YES_NO_ROUGHLY,
    },
    {
        "key": "crm_data",
        "category": Category.MARKETING,
        "domain": Domain.TERNARY,
        "prompt": "Is there organized customer data (CRM)?",
        "options": YES_NO_ROUGHLY,
    },
    {
        "key": "marketing_plan",
        "category": Category.MARKETING,
        "domain": Domain.TERNARY,
        "prompt": "Is there an active marketing plan or regular marketing channels?",
        "options": YES_NO_ROUGHLY,
    },
    # Presentation
    {
        "key": "ready_to_show",
        "category": Category.PRESENTATION,
        "domain": Domain.TERNARY,
        "prompt": "Do you currently have prospective buyers interested in the business?",
        "options": [
            {"label": "Yes", "value": "yes"},
            {"label": "No", "value": "no"},
            {"label": "Maybe", "value": "dont_know"},
        ],
    },
    {
        "key": "teaser_ready",
        "category": Category.PRESENTATION,
        "domain": Domain.TERNARY,
        "prompt": "Do you have an executive summary (teaser) ready?",
        "options": YES_NO_ROUGHLY,
    },
    {
        "key": "kpis_available",
        "category": Category.PRESENTATION,
        "domain": Domain.TERNARY,
        "prompt": "Are ongoing business metrics (KPIs) tracked?",
        "options": YES_NO_ROUGHLY,
    },
]

# (positive, cautionary, negative) per question: score 5 / 2-4 / 1.
ANALYSIS = {
    "financial_statements": (
        "Organized financial statements exist for the last three years.",
        "Financial statements exist only partially or are not up to date.",
        "There are no organized financial statements, or they are out of date.",
    ),
    "expense_separation": (
        "Personal and business expenses are clearly separated.",
        "Expenses are only partially separated.",
        "There is no clear separation between personal and business expenses.",
    ),
    "cash_flow": (
        "Cash flow is positive and stable.",
        "Cash flow is moderate or not stable enough.",
        "Cash flow is negative or unstable.",
    ),
    "financing_ready": (
        "The business reports in a way that lets a buyer obtain financing.",
        "The business's reporting supports only partial financing.",
        "The business does not report in a way that lets a buyer obtain financing.",
    ),
    "owner_dependency": (
        "The business does not rely on you in day-to-day management.",
        "The business relies on you to a moderate degree.",
        "The business relies on you constantly and completely.",
    ),
    "employee_management": (
        "There are employees who can keep running part of the operation.",
        "Some employees can partly run part of the operation.",
        "No employees can keep running part of the operation.",
    ),
    "written_procedures": (
        "Written procedures exist for the core processes of the business.",
        "Procedures exist partially or are not organized.",
        "There are no organized procedures or delegation of authority.",
    ),
    "physical_assets": (
        "The business holds significant inventory and equipment.",
        "The business holds some physical assets.",
        "The business holds no significant physical assets.",
    ),
    "intangible_assets": (
        "The business has intangible assets (brand, website, goodwill).",
        "The business has some intangible assets.",
        "The business has no significant intangible assets.",
    ),
    "asset_management": (
        "All assets are recorded and managed clearly.",
        "Assets are only partially recorded.",
        "There is no organized asset register or current valuation.",
    ),
    "contracts_updated": (
        "All contracts are up to date and signed.",
        "Some contracts are up to date and some are not.",
        "Some contracts are missing or out of date.",
    ),
    "licenses": (
        "The business holds every license it needs.",
        "Licensing is only partially in place.",
        "Licensing is missing or not always up to date.",
    ),
    "legal_risks": (
        "There are no known lawsuits or legal risks.",
        "There are minor legal risks.",
        "There are lawsuits or legal risks.",
    ),
    "loyal_customers": (
        "There is a loyal, returning customer base.",
        "There is a partial customer base.",
        "There is no returning or loyal customer base.",
    ),
    "crm_data": (
        "Organized customer data (CRM) exists.",
        "Customer data exists only partially.",
        "There is no organized customer data.",
    ),
    "marketing_plan": (
        "There is regular marketing activity.",
        "There is some marketing activity.",
        "There is no active marketing plan.",
    ),
    "ready_to_show": (
        "You can present the business to interested buyers within a week.",
        "You can present the business only partially or not quickly enough.",
        "You cannot present the business quickly.",
    ),
    "teaser_ready": (
        "An executive summary (teaser) is ready.",
        "The teaser is partial or not up to date.",
        "There is no executive summary.",
    ),
    "kpis_available": (
        "Ongoing business metrics (KPIs) are tracked.",
        "Metrics are partial or not up to date.",
        "KPIs cannot be shown quickly and are not documented.",
    ),
}

RECOMMENDATION_THRESHOLD = 3.5
GENERIC_RECS_BELOW = 80

GENERIC_RECS = [
    "Review every area and address the weak points.",
    "Improve the processes and procedures in the business.",
    "Prepare the business for sale professionally.",
]

RECS = {
    Category.FINANCIAL: [
        "Sort out statements and cash flow: organize documents, update profitability and bookkeeping.",
        "Clearly separate personal and business expenses.",
        "Produce audited statements for the past three years.",
    ],
    Category.OWNER_DEPENDENCY: [
        "Create written procedures: hand tasks over to employees and reduce dependence on you.",
        "Increase the independence of your employees.",
        "Document the core processes of the business.",
    ],
    Category.ASSETS: [
        "Document and organize all physical and intangible assets.",
        "Create an organized inventory list with a valuation.",
        "Document intangible assets (brand, goodwill, licenses).",
    ],
    Category.LEGAL: [
        "Put the legal side in order: contracts, licensing and critical documents.",
        "Update and sign all contracts with suppliers, employees and customers.",
        "Make sure you hold every license the business needs to operate.",
    ],
    Category.MARKETING: [
        "Build an organized CRM system for managing customers.",
        "Develop an active marketing plan with regular channels.",
        "Improve the digital presence of the business.",
    ],
    Category.PRESENTATION: [
        "Prepare a teaser for the business: a short summary for first presentation to buyers.",
        "Build an ongoing business metrics (KPI) system.",
        "Improve your ability to present the business quickly to interested buyers.",
    ],
}

READY_RECS = [
    "Your business is well prepared for sale!",
    "Make sure all documents are up to date.",
    "Maintain the high level of readiness.",
]

# (minimum overall score, verbal assessment, readiness level); first match wins.
TIERS = [
    (80, "business ready at a high level for sale", "high"),
    (60, "business ready at a medium level for sale", "medium"),
    (40, "business requires further preparation before sale", "low – requires preparation"),
    (0, "business requires significant work before sale", "very low – requires significant work"),
]


# --- Runtime settings -----------------------------------------------------------------------------


def _env_flag(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


load_dotenv()

CONSULTATION_URL = os.getenv("CONSULTATION_URL", "").strip()
CONSULTATION_TIMEOUT = float(os.getenv("CONSULTATION_TIMEOUT", "10"))
# Unanswered questions score 0 when partial answer sets are allowed.
ALLOW_PARTIAL_ANSWERS = _env_flag("ALLOW_PARTIAL_ANSWERS", True)
AUTO_ADVANCE_MS = int(os.getenv("AUTO_ADVANCE_MS", "300"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
