"""HTTP API module"""
