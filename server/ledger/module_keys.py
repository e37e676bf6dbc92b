from enum import Enum


class ModuleKey(str, Enum):
    FINANCE = "FINANCE"
    CHART_OF_ACCOUNTS = "CHART_OF_ACCOUNTS"


MODULE_DEFINITIONS: list[tuple[ModuleKey, str]] = [
    (ModuleKey.FINANCE, "Finance"),
    (ModuleKey.CHART_OF_ACCOUNTS, "Chart of Accounts"),
]
