"""
Process control components for Term Relay
"""

from .process_controller import ProcessController, CapturedProcess, Command, ProcessOutcome

__all__ = ["ProcessController", "CapturedProcess", "Command", "ProcessOutcome"]
