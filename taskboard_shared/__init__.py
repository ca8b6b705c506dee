"""Wire schemas shared by the Taskboard server and its clients."""
