"""Scope-aware prize lottery for club, zone and district draws."""
