"""Service layer for the rental search engine"""
