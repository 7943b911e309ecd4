from medvault.api.authorizations.orm.authorization_model import AuthorizationModel

__all__ = ["AuthorizationModel"]
