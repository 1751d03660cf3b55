"""
connectors — federated identity providers.

Each provider (Google, …) is a subclass of IdentityProvider and turns
what the client obtained from it into a verified email address.
"""
