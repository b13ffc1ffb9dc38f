"""Domain packages: catalog, bookings, assignments, commissions, scheduling, stats, events"""
