"""Fixed-interval polling of the sensor device."""
