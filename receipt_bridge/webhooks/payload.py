from dataclasses import dataclass
from typing import Any

from receipt_bridge.errors import MalformedPayload


@dataclass(frozen=True)
class PaymentOutcome:
    succeeded: bool


@dataclass(frozen=True)
class FormSubmission:
    form_id: str
    response_token: str
    payer_email: str
    payment: PaymentOutcome


def extract_submission(payload: Any) -> FormSubmission:
    """
    Pull the fields reconciliation needs out of a Typeform webhook body.

    The first `email` answer and the first `payment` answer win. Values are
    returned exactly as sent.

    Raises:
        MalformedPayload: for any missing or mistyped field.
    """
    if not isinstance(payload, dict):
        raise MalformedPayload("request body is malformed")

    form_response = payload.get("form_response")
    if not isinstance(form_response, dict):
        raise MalformedPayload("request body is malformed")

    form_id = form_response.get("form_id")
    token = form_response.get("token")
    answers = form_response.get("answers")
    if not isinstance(form_id, str) or not isinstance(token, str) or not isinstance(answers, list):
        raise MalformedPayload("request body is malformed")

    email_answer = None
    payment_answer = None
    for answer in answers:
        if not isinstance(answer, dict):
            continue
        answer_type = answer.get("type")
        if answer_type == "email" and email_answer is None:
            email_answer = answer
        elif answer_type == "payment" and payment_answer is None:
            payment_answer = answer
        if email_answer is not None and payment_answer is not None:
            break

    if email_answer is None or payment_answer is None:
        raise MalformedPayload("request body is malformed")

    email = email_answer.get("email")
    payment = payment_answer.get("payment")
    if not isinstance(email, str) or not isinstance(payment, dict):
        raise MalformedPayload("request body is malformed")

    success = payment.get("success")
    if not isinstance(success, bool):
        raise MalformedPayload("request body is malformed")

    return FormSubmission(
        form_id=form_id,
        response_token=token,
        payer_email=email,
        payment=PaymentOutcome(succeeded=success),
    )
