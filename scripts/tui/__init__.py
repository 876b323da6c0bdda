"""
Countdown TUI - textual dashboard for the countdown + pomodoro timer.

Architecture:
- app.py: application, timers and command handling
- views/: Textual screen/widget components

The app drives the same PomodoroEngine, ConfigStore and CountdownScheduler
as the console loop; only the presentation differs.
"""
