"""
Dash adapter layer: layout builders and callbacks over a RankingSession.
"""
