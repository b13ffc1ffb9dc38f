"""Cross-domain services: notifications, live events and background maintenance"""
