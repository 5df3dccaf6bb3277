"""
Fabric gateway client: credentials, TLS transport and gateway session.

Defines the capability protocols the transaction driver depends on and a
concrete implementation speaking the Fabric Gateway gRPC service.
"""
