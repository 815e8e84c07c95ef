"""Command line interface for gitops-tool"""
