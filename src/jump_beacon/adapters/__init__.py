"""Host adapters binding the beacon core to concrete UI toolkits."""
