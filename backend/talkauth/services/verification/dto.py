# talkauth/services/verification/dto.py
from __future__ import annotations

from dataclasses import dataclass

from talkauth.services._shared.ports import CodePurpose


@dataclass(frozen=True, slots=True)
class IssueCodeIn:
    """
    Input DTO for issuing a verification code.

    :param email: Destination address (normalized to lowercase).
    :type email: str
    :param purpose: Namespace of the code.
    :type purpose: CodePurpose
    :param account_id: Account the code is bound to, for recovery flows.
    :type account_id: str | None
    """

    email: str
    purpose: CodePurpose = CodePurpose.SIGN_UP
    account_id: str | None = None


@dataclass(frozen=True, slots=True)
class ConfirmCodeIn:
    """
    Input DTO for confirming a verification code.

    :param email: Address the code was sent to.
    :type email: str
    :param code: Code typed by the user.
    :type code: str
    :param purpose: Namespace of the code.
    :type purpose: CodePurpose
    """

    email: str
    code: str
    purpose: CodePurpose = CodePurpose.SIGN_UP
