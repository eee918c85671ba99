"""Session handling, tracker client and summary parsing for the ETT bridge."""
