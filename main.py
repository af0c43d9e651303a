import logging

from py_colstore.document.store import Database


logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")

db = Database("./db")

users = db.collection("users")
files = db.collection("files")

bob_id = users.insert({"name": "Bob", "age": 30, "role": "member"})
users.insert({"name": "Alice", "age": 41, "role": "admin"})

files.insert({"filename": "resume.pdf", "size": 12345, "user_id": bob_id})

print(users.find("role", "admin"))
print(users.find_with_operator("age", "30", "eq"))
print(files.find_with_operator("filename", ".pdf", "ends_with"))

# rewrites users.col
users.update_field(bob_id, "role", "guest")
users.delete_by_id(bob_id)

db.close()
