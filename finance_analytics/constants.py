INCOME = "income"
EXPENSE = "expense"
TRANSFER = "transfer"

DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"
YEARLY = "yearly"

INCREASING = "increasing"
DECREASING = "decreasing"
STABLE = "stable"

HIGH = "high"
MEDIUM = "medium"
LOW = "low"

# split amounts and budget remainders are compared with this tolerance
SPLIT_EPSILON = 0.01

TREND_THRESHOLD_PERCENT = 5.0

PREDICTION_LOOKBACK_MONTHS = 3
MIN_PREDICTION_MONTHS = 2
HIGH_CONFIDENCE_CV = 0.2
LOW_CONFIDENCE_CV = 0.5

INSIGHT_LIMIT = 5
INSIGHT_VELOCITY_PERCENT = 10.0
INSIGHT_TOP_CATEGORY_PERCENT = 40.0
INSIGHT_LARGE_EXPENSE_FACTOR = 2.0
INSIGHT_GOOD_SAVINGS_PERCENT = 20.0

UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_ICON = "💰"
PLACEHOLDER_COLOR = "#999999"
UNKNOWN_ACCOUNT_NAME = "Unknown Account"
UNKNOWN_LABEL_NAME = "Unknown Label"

# Sunday-first, also the tie-break order for the most active day
WEEKDAYS = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

INVESTMENT_ACCOUNT_TYPES = (
    "Fixed Deposit (FD)",
    "Recurring Deposit (RD)",
    "Public Provident Fund (PPF)",
    "Monthly Income Scheme (MIS)",
    "National Pension System (NPS)",
    "Mutual Fund",
    "Stocks",
    "Bonds",
    "Gold",
)
