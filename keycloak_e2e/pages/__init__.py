from keycloak_e2e.pages.application_page import ApplicationPage, LogoutResult
from keycloak_e2e.pages.login_page import KeycloakLoginPage

__all__ = ["ApplicationPage", "KeycloakLoginPage", "LogoutResult"]
