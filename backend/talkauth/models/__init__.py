from talkauth.models.account import Account, Gender, Role

__all__ = ["Account", "Gender", "Role"]
