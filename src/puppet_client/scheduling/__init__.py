"""
Scheduling subsystem.

Components:
- detector.py: cheap snapshot change detection (SnapshotBuffer, differs)
- tasks.py: the two task bodies (HeartbeatTask, SnapshotTask)
- schedule.py: per-connection executor with cancellable fixed-rate schedules
- supervisor.py: keeps exactly one of heartbeat/snapshot scheduled (TaskSupervisor)
"""
