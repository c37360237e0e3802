"""pocketbot – a small prefix-command Discord bot."""
