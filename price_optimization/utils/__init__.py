"""Pricing Engine Utilities"""
