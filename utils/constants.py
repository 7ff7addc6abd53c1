APP_NAME = "Payday Budget"
APP_WIDTH = 1100
APP_HEIGHT = 720
DB_FILE = "payday_budget.db"
LOGGER_NAME = "payday_budget"

DATE_FORMAT = "%Y-%m-%d"

# Pay period: the 15th of each month, moved back to Friday on weekends
PAYDAY_DAY_OF_MONTH = 15

# app_settings keys
LAST_AUTOMATION_DAY_KEY = "last_recurring_day"
MONTHLY_INCOME_KEY = "monthly_income"

AUTOMATION_PREVIEW_NAMES = 3
WEEKLY_MIN_GAP_DAYS = 7

RULE_TYPES = ("income", "expense")
CATEGORY_TYPES = ("budget", "fixed")
FREQUENCIES = ["monthly", "weekly"]
# Sunday=0 .. Saturday=6
DAYS_OF_WEEK = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

DEFAULT_INCOME = 6400.0

DEFAULT_CATEGORIES = [
    {"name": "Housing",       "type": "fixed",  "allocated": 1800.0, "spent": 0.0},
    {"name": "Groceries",     "type": "budget", "allocated": 650.0,  "spent": 520.0},
    {"name": "Transport",     "type": "budget", "allocated": 300.0,  "spent": 210.0},
    {"name": "Savings",       "type": "fixed",  "allocated": 900.0,  "spent": 0.0},
    {"name": "Entertainment", "type": "budget", "allocated": 300.0,  "spent": 180.0},
]

DEFAULT_RECURRING_RULES = [
    {"name": "Salary", "type": "income",  "amount": 6400.0, "category": None,
     "frequency": "monthly", "day_of_month": 15},
    {"name": "Rent",   "type": "expense", "amount": 1800.0, "category": "Housing",
     "frequency": "monthly", "day_of_month": 1},
]

SEVERITY_COLORS = {
    "error":   "#F44336",
    "warning": "#FF9800",
    "info":    "#2196F3",
}
