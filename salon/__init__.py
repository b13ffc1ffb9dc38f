"""Salon booking and commission settlement API"""
