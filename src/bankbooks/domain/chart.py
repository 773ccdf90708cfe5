"""Chart-of-accounts conventions.

Account types follow the leading digit of the code, and expense accounts roll
up into reporting categories by their first four characters.
"""

from bankbooks.domain.entities import AccountType, MatchType
from bankbooks.domain.errors import ValidationError


BANK_ACCOUNT_CODE = "1100"
BANK_ACCOUNT_NAME = "Bank - Current Account"
OPENING_BALANCE_EQUITY_CODE = "3900"
OPENING_BALANCE_EQUITY_NAME = "Opening Balance Equity"

DEFAULT_CATEGORY = "Other"

ROLLUP_CATEGORIES = {
    "1100": "Bank",
    "3900": "Equity",
    "4000": "Sales Revenue",
    "4200": "Interest Income",
    "8100": "Employee Costs",
    "8200": "Rent Expense",
    "8300": "Utilities",
    "8400": "Communication",
    "8500": "Motor Vehicle Expenses",
    "8600": "Fuel Expenses",
    "8700": "Professional Services",
    "8800": "Insurance",
    "8900": "Administrative Expenses",
    "9500": "Interest Expense",
    "9600": "Bank Charges",
}

_TYPE_BY_LEADING_DIGIT = {
    "1": AccountType.ASSET,
    "2": AccountType.LIABILITY,
    "3": AccountType.EQUITY,
    "4": AccountType.INCOME,
    "5": AccountType.INCOME,
    "6": AccountType.INCOME,
    "7": AccountType.EXPENSE,
    "8": AccountType.EXPENSE,
    "9": AccountType.EXPENSE,
}


def infer_account_type(code: str) -> AccountType:
    """Infer the account type from the first digit of an account code.

    Raises:
        ValidationError: If the code does not start with a digit 1-9
    """
    code = code.strip()
    account_type = _TYPE_BY_LEADING_DIGIT.get(code[:1])
    if account_type is None:
        raise ValidationError(f"Cannot infer account type for code '{code}'")
    return account_type


def infer_category(code: str) -> str:
    """Return the roll-up category for an account code, or "Other"."""
    return ROLLUP_CATEGORIES.get(code.strip()[:4], DEFAULT_CATEGORY)


def is_debit_normal(account_type: AccountType) -> bool:
    """Assets and expenses increase on the debit side."""
    return account_type in (AccountType.ASSET, AccountType.EXPENSE)


# (rule name, pattern, match type, account code, account name, priority)
STANDARD_RULES = (
    ("Immediate payment fee", "FEE IMMEDIATE PAYMENT", MatchType.CONTAINS, "9600", "Bank Charges", 10),
    ("Service fee", "SERVICE FEE", MatchType.CONTAINS, "9600", "Bank Charges", 9),
    ("Admin fee", "ADMIN FEE", MatchType.CONTAINS, "9600", "Bank Charges", 9),
    ("Bank fee", "BANK FEE", MatchType.CONTAINS, "9600", "Bank Charges", 9),
    ("ATM", "ATM", MatchType.CONTAINS, "9600", "Bank Charges", 6),
    ("Fee", "FEE", MatchType.CONTAINS, "9600", "Bank Charges", 5),
    ("Excess interest", "EXCESS INTEREST", MatchType.CONTAINS, "9500", "Interest Expense", 9),
    ("Interest capitalised", "INTEREST CAPITALISED", MatchType.CONTAINS, "4200", "Interest Income", 9),
    ("Salary", "SALARY", MatchType.CONTAINS, "8100", "Employee Costs", 8),
    ("Wages", "WAGE", MatchType.CONTAINS, "8100", "Employee Costs", 8),
    ("Insurance premium", "INSURANCE PREMIUM", MatchType.CONTAINS, "8800", "Insurance", 9),
    ("Insurance", "INSURANCE", MatchType.CONTAINS, "8800", "Insurance", 8),
    ("Insure", "INSURE", MatchType.CONTAINS, "8800", "Insurance", 7),
    ("Rent", "RENT", MatchType.CONTAINS, "8200", "Rent Expense", 5),
    ("Electricity", "ELECTRICITY", MatchType.CONTAINS, "8300", "Utilities", 7),
    ("Water", "WATER", MatchType.CONTAINS, "8300", "Utilities", 6),
    ("Telephone", "TELEPHONE", MatchType.CONTAINS, "8400", "Communication", 7),
    ("Cellphone", "CELL", MatchType.CONTAINS, "8400", "Communication", 6),
    ("Internet", "INTERNET", MatchType.CONTAINS, "8400", "Communication", 7),
    ("Vehicle tracking", "TRACKING", MatchType.CONTAINS, "8500", "Motor Vehicle Expenses", 6),
    ("Fuel", "FUEL", MatchType.CONTAINS, "8600", "Fuel Expenses", 7),
    ("Accounting fees", "ACCOUNTING", MatchType.CONTAINS, "8700", "Professional Services", 7),
    ("Stationery", "STATIONERY", MatchType.CONTAINS, "8900", "Administrative Expenses", 6),
    ("Printing", "PRINTING", MatchType.CONTAINS, "8900", "Administrative Expenses", 6),
    ("Deposit", "DEPOSIT", MatchType.CONTAINS, "4000", "Sales Revenue", 5),
    ("Credit transfer", "CREDIT TRANSFER", MatchType.CONTAINS, "4000", "Sales Revenue", 5),
)
