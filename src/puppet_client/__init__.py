"""Puppet client: heartbeat / screen snapshot scheduling for one server connection."""
