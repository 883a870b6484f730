"""Service layer: resolvers built on the provider fallback chain"""
