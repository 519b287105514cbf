from __future__ import annotations


class RosterError(Exception):
    pass


class ConfigError(RosterError):
    pass


class UnknownSeason(ConfigError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Unknown season: {key!r}")
        self.key = key


class TableNotFound(RosterError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Sheet '{name}' not found.")
        self.name = name


class EmptyTable(RosterError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Sheet '{name}' has no data rows.")
        self.name = name


class FormulaCellsPresent(RosterError):
    def __init__(self, sheets) -> None:
        self.sheets = list(sheets)
        names = ", ".join(f"'{s}'" for s in self.sheets)
        super().__init__(
            f"Formula cells found in {names}. Saving would drop their calculated values; "
            "paste them as values and retry."
        )
