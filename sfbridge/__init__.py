"""sfbridge - forwards Salesforce streaming events to a message queue topic."""

__version__ = "0.1.0"
