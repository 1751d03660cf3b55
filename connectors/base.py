"""
IdentityProvider — abstract interface for federated sign-in providers.

A provider turns whatever the client received from it into a verified
email address, or raises.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IdentityProvider(ABC):
    """Abstract base for federated identity providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique slug: 'google', …"""
        ...

    @abstractmethod
    async def verify_id_token(self, credential: str) -> str:
        """
        Verify a provider-issued identity assertion.

        Returns
        -------
        The verified email address.

        Raises
        ------
        AuthenticationError
            The provider rejected the assertion or it carries no email.
        DependencyError
            The provider could not be reached.
        """
        ...

    @abstractmethod
    async def verify_access_token(self, access_token: str, claimed_email: str) -> str:
        """
        Fetch the profile behind ``access_token`` and require its email to
        equal ``claimed_email`` exactly.
        """
        ...
