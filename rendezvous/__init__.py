# Wallet rendezvous & signaling relay
#
# Provides:
#  - FIFO matchmaking of wallet-identified clients into exclusive pairs
#  - opaque relay of WebRTC negotiation payloads between paired clients
#  - inactivity sweep of the waiting queue
#
# See rendezvous/server.py for the app entry point.
