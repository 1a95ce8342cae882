"""
GraphQL documents for the remote inventory API

Every document is a named operation; the operation name is used for logging,
metrics and by the in-memory transport to dispatch.
"""
import re

_OPERATION_RE = re.compile(r"^\s*(?:query|mutation)\s+(\w+)", re.MULTILINE)

ITEM_FIELDS = """
    id
    name
    category
    defaultUnit
    location
    totalQuantity
    status
    nextExpiry
    createdAt
    updatedAt
    batches {
      id
      quantity
      unit
      status
    }
"""

GET_HOUSES = """
  query GetHouses {
    houses {
      id
      name
      description
      createdDate
    }
  }
"""

CREATE_HOUSE = """
  mutation CreateHouse($input: CreateHouseInput!) {
    createHouse(input: $input) {
      id
      name
      description
      createdDate
    }
  }
"""

GET_HOUSEHOLDS = """
  query GetHouseholds {
    households {
      id
      name
      kitchens {
        id
        name
      }
    }
  }
"""

CREATE_HOUSEHOLD = """
  mutation CreateHousehold($input: CreateHouseholdInput!) {
    createHousehold(input: $input) {
      id
      name
    }
  }
"""

CREATE_KITCHEN = """
  mutation CreateKitchen($input: CreateKitchenInput!) {
    createKitchen(input: $input) {
      id
      name
    }
  }
"""

GET_INVENTORY_ITEMS = f"""
  query GetInventoryItems($kitchenId: ID!) {{
    inventoryItems(kitchenId: $kitchenId) {{{ITEM_FIELDS}}}
  }}
"""

GET_INVENTORY_ITEM = f"""
  query GetInventoryItem($id: ID!) {{
    inventoryItem(id: $id) {{{ITEM_FIELDS}}}
  }}
"""

CREATE_INVENTORY_ITEM = """
  mutation CreateInventoryItem($input: CreateInventoryItemInput!) {
    createInventoryItem(input: $input) {
      id
      name
      category
      defaultUnit
      createdAt
    }
  }
"""

CREATE_INVENTORY_BATCH = """
  mutation CreateInventoryBatch($input: CreateInventoryBatchInput!) {
    createInventoryBatch(input: $input) {
      id
      quantity
      unit
    }
  }
"""

UPDATE_INVENTORY_ITEM = """
  mutation UpdateInventoryItem($id: ID!, $input: UpdateInventoryItemInput!) {
    updateInventoryItem(id: $id, input: $input) {
      id
      name
      category
      defaultUnit
      totalQuantity
      updatedAt
    }
  }
"""

DELETE_INVENTORY_ITEM = """
  mutation DeleteInventoryItem($id: ID!) {
    deleteInventoryItem(id: $id)
  }
"""

PROCESS_VOICE_COMMAND = """
  mutation ProcessVoiceCommand($transcript: String!) {
    processVoiceCommand(transcript: $transcript) {
      intent
      item {
        raw_name
        normalized_name
        category
        quantity
        unit
        location
      }
      confidence
      transcript
    }
  }
"""

CATEGORIZE_PRODUCT = """
  query CategorizeProduct($productName: String!) {
    categorizeProduct(productName: $productName) {
      category
      confidence
      reasoning
    }
  }
"""


def operation_name(document: str) -> str:
    """Return the operation name of a GraphQL document ("anonymous" if none)"""
    match = _OPERATION_RE.search(document)
    return match.group(1) if match else "anonymous"
