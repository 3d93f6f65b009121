from __future__ import annotations

from typing import Dict, List, Union

from .rules import RuleTable, builtins


class RuleRegistry:
    def __init__(self):
        self._rules: Dict[str, RuleTable] = builtins()

    def get(self, rule: Union[str, int]) -> RuleTable:
        """Look up a rule by name ("rule30") or by Wolfram number (30)."""
        if isinstance(rule, int):
            for table in self._rules.values():
                if table.number == rule:
                    return table
            return RuleTable(rule)
        if rule not in self._rules:
            raise KeyError(f"Unknown rule: {rule}")
        return self._rules[rule]

    def register(self, table: RuleTable) -> None:
        if table.name in self._rules and self._rules[table.name] != table:
            raise ValueError(f"Rule name already registered: {table.name}")
        self._rules[table.name] = table

    def list(self) -> List[RuleTable]:
        return sorted(self._rules.values(), key=lambda r: r.number)

    def exists(self, rule: Union[str, int]) -> bool:
        if isinstance(rule, int):
            return any(t.number == rule for t in self._rules.values())
        return rule in self._rules
