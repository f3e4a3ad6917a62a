"""
Attendance Check-in Station — Offline Sync Agent
================================================
Records event check-ins/check-outs from a scanner or keyboard. Records are
written to a local buffer first and delivered to the backend as soon as
the network allows; nothing scanned offline is lost across restarts.

Usage:
    python agent.py
"""

from attendance_sync.runner import main

if __name__ == "__main__":
    main()
