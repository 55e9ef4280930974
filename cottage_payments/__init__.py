"""Serverless-style payment and email functions for the bakery storefront"""
