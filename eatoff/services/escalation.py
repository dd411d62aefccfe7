from __future__ import annotations

from dataclasses import dataclass

# Checked in order; the first phrase found in the message is reported.
ESCALATION_KEYWORDS = (
    "refund",
    "rambursare",
    "banii înapoi",
    "money back",
    "payment failed",
    "plată eșuată",
    "charged twice",
    "taxat de două ori",
    "cancel subscription",
    "anulare abonament",
    "account hacked",
    "cont spart",
    "security",
    "securitate",
    "legal",
    "lawyer",
    "avocat",
    "sue",
    "proces",
    "speak to human",
    "human agent",
    "operator",
    "agent real",
    "complaint",
    "reclamație",
    "manager",
    "supervisor",
)

ESCALATION_ACK_TEMPLATE = (
    "Am înțeles că ai nevoie de ajutor cu această problemă. "
    "Am creat un ticket de suport ({ticket_number}) și un agent real va răspunde "
    "în cel mai scurt timp. Între timp, pot să te ajut cu altceva?\n\n"
    "We understand you need help with this issue. We created support ticket "
    "{ticket_number} and a human agent will reply as soon as possible. "
    "Meanwhile, is there anything else I can help with?"
)


@dataclass(frozen=True)
class EscalationCheck:
    escalate: bool
    reason: str | None = None


def should_escalate(message: str) -> EscalationCheck:
    """Plain substring match, so negations ("I do NOT want a refund") still escalate."""
    lowered = (message or "").lower()
    for keyword in ESCALATION_KEYWORDS:
        if keyword.lower() in lowered:
            return EscalationCheck(escalate=True, reason=f'User mentioned: "{keyword}"')
    return EscalationCheck(escalate=False)


def escalation_ack(ticket_number: str) -> str:
    return ESCALATION_ACK_TEMPLATE.format(ticket_number=ticket_number)
