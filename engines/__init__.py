"""
Quiz Scam Tracker engines
Detection rules and the scanning engine
"""
