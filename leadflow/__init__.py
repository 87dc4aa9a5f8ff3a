"""LeadFlow - lead scoring, smart queues and call-outcome engine"""

__version__ = "1.0.0"
