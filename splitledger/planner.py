"""
Settlement Planner

Greedy two-pointer walk over debtors and creditors in the order the balances
arrive. The lists are deliberately not sorted by amount: the plan is tied to
the balance ordering so that repeated reads produce the same transfers.
"""

from decimal import Decimal
from typing import Iterable

from .models import NetBalance, Participant, Settlement, BALANCE_TOLERANCE


def plan_settlements(net_balances: Iterable[NetBalance]) -> list[Settlement]:
    creditors: list[tuple[Participant, Decimal]] = []
    debtors: list[tuple[Participant, Decimal]] = []
    for balance in net_balances:
        who = Participant(id=balance.participant_id, name=balance.name)
        if balance.is_creditor():
            creditors.append((who, balance.net))
        elif balance.is_debtor():
            debtors.append((who, -balance.net))

    settlements = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor, owes = debtors[i]
        creditor, due = creditors[j]
        pay = min(owes, due)
        settlements.append(Settlement(from_participant=debtor, to=creditor, amount=pay))
        debtors[i] = (debtor, owes - pay)
        creditors[j] = (creditor, due - pay)
        if debtors[i][1] <= BALANCE_TOLERANCE:
            i += 1
        if creditors[j][1] <= BALANCE_TOLERANCE:
            j += 1
    return settlements
