"""Utils package: logging setup, Ogg/Opus transcoding and voice waveforms."""
