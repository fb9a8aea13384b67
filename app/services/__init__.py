"""
                        Services Module

    - store: every read and write the API performs against the database
    - dashboard: data for the HTML admin dashboard
"""
