from eatoff.services.escalation import ESCALATION_KEYWORDS, escalation_ack, should_escalate


def test_refund_request_escalates_with_reason() -> None:
    check = should_escalate("I want a refund for my order")
    assert check.escalate is True
    assert check.reason == 'User mentioned: "refund"'


def test_regular_question_stays_with_ai() -> None:
    check = should_escalate("How do I find vegan restaurants near me?")
    assert check.escalate is False
    assert check.reason is None


def test_match_is_case_insensitive() -> None:
    assert should_escalate("Let me SPEAK TO HUMAN now").escalate is True
    assert should_escalate("Vreau RAMBURSARE").reason == 'User mentioned: "rambursare"'


def test_romanian_diacritics_phrase_matches() -> None:
    check = should_escalate("Am o reclamație despre comanda mea")
    assert check.escalate is True
    assert check.reason == 'User mentioned: "reclamație"'


def test_negated_phrase_still_escalates() -> None:
    # Substring matching ignores negation.
    assert should_escalate("I do NOT want a refund").escalate is True


def test_first_keyword_in_list_order_is_reported() -> None:
    check = should_escalate("my manager says I need a refund")
    assert check.reason == 'User mentioned: "refund"'
    assert ESCALATION_KEYWORDS.index("refund") < ESCALATION_KEYWORDS.index("manager")


def test_empty_message_does_not_escalate() -> None:
    assert should_escalate("").escalate is False


def test_ack_mentions_ticket_number_in_both_languages() -> None:
    text = escalation_ack("TKT-2026-ABC123")
    assert text.count("TKT-2026-ABC123") == 2
    assert "agent real" in text
    assert "human agent" in text
