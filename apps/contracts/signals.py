from django.dispatch import Signal

# Sent with: contract, user
contract_created = Signal()

# Sent with: contract, old_status, new_status, user
contract_status_changed = Signal()

# Sent with: contract
contract_calculated = Signal()
