# =============================================================================
# File: tradebot/infra/platform/__init__.py
# Description: External platform clients - ports, handle bundle, facades
# =============================================================================

"""
Platform

- ports: Protocols implemented by the community / trade / store / friends / auth clients
- handles: PlatformHandles bundle rebuilt on every logout
- community_actions: CommunityActions (shared files, follows, groups)
- request_client: RequestClient (manual GET/POST, Web API)
"""

__all__ = []
