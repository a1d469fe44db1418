from .auth_service import AuthService, AuthResult, redirect_after_login, safe_next_path

__all__ = ['AuthService', 'AuthResult', 'redirect_after_login', 'safe_next_path']
