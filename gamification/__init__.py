"""Classroom gamification: levels, leaderboards and student progress."""
