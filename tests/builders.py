"""
Builders сырых записей backend-а графа для тестов.

Возвращают dict-ы в той форме, в которой их отдаёт источник данных.
"""

from typing import Any, Optional

TRIPLE_TERM_ID = "0xtriple"
COUNTER_TERM_ID = "0xcounter"
VIEWER_ID = "0xviewer"


def make_atom(
    label: Optional[str],
    term_id: Optional[str] = None,
    kind: Optional[str] = "thing",
    data: Optional[str] = None,
) -> dict[str, Any]:
    """Atom с одним заполненным вариантом значения"""
    value: dict[str, Any] = {"thing": None, "account": None, "person": None, "organization": None}
    if kind == "account":
        value["account"] = {"id": term_id, "label": label}
    elif kind is not None:
        value[kind] = {"name": label, "description": f"{label} description"}
    return {
        "term_id": term_id or f"0xatom-{label}",
        "label": label,
        "data": data,
        "value": value,
    }


def make_vault(total_shares: Any, term_id: str, curve_id: Optional[str] = "1") -> dict[str, Any]:
    return {
        "term_id": term_id,
        "curve_id": curve_id,
        "position_count": 3,
        "total_shares": total_shares,
        "current_share_price": "1000000000000000000",
    }


def make_triple(
    subject: Optional[str] = "Alice",
    predicate: Optional[str] = "knows",
    obj: Optional[str] = "Bob",
    term_id: str = TRIPLE_TERM_ID,
    counter_term_id: str = COUNTER_TERM_ID,
    support_total: Any = "100",
    oppose_total: Any = "50",
    object_kind: str = "thing",
    object_id: Optional[str] = None,
) -> dict[str, Any]:
    """Triple с парными vault-ами term/counter_term"""
    return {
        "term_id": term_id,
        "counter_term_id": counter_term_id,
        "subject": make_atom(subject),
        "predicate": make_atom(predicate),
        "object": make_atom(obj, term_id=object_id, kind=object_kind),
        "term": {"vaults": [make_vault(support_total, term_id)]},
        "counter_term": {"vaults": [make_vault(oppose_total, counter_term_id)]},
    }


def make_account(account_id: str = VIEWER_ID, label: Optional[str] = "viewer.eth") -> dict[str, Any]:
    return {"id": account_id, "label": label, "image": None}


def make_triple_position(
    shares: Any,
    stance: str = "support",
    position_id: Optional[str] = None,
    account: Optional[dict[str, Any]] = None,
    triple: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Позиция на triple (support) или на его counter-term (oppose)"""
    triple = triple or make_triple()
    term_id = triple["term_id"] if stance == "support" else triple["counter_term_id"]
    return {
        "id": position_id or f"pos-{stance}-{shares}",
        "shares": shares,
        "account": account or make_account(),
        "term": {
            "term_id": term_id,
            "triple": triple,
            "vaults": [make_vault(shares, term_id)],
        },
    }


def make_atom_position(
    shares: Any,
    label: Optional[str] = "Ethereum",
    data: Optional[str] = None,
    position_id: Optional[str] = None,
    account: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Позиция на atom"""
    atom = make_atom(label, data=data)
    return {
        "id": position_id or f"pos-atom-{shares}",
        "shares": shares,
        "account": account or make_account(),
        "term": {
            "term_id": atom["term_id"],
            "atom": atom,
            "vaults": [make_vault(shares, atom["term_id"])],
        },
    }
